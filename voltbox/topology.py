"""
Battery arrangement analysis: grouping batteries into series chains and
classifying LEDs as series or parallel.
"""

from collections import namedtuple


BatteryTopology = namedtuple('BatteryTopology', ['series_chains', 'voltage', 'parallel_count'])
BatteryTopology.__doc__ = """
Series/parallel arrangement of the batteries feeding one load.

series_chains: list of battery lists, each judged to be wired end to end
voltage: charged voltage of the first chain (a representative value)
parallel_count: number of chains with a battery wired directly to the load
"""


def chain_voltage(chain):
    """Sum of the nominal voltages of the charged batteries in ``chain``."""
    return sum(battery.effective_voltage for battery in chain)


def analyze_battery_topology(graph, batteries, load):
    """
    Group ``batteries`` into series chains.

    Each unvisited battery (in the given order) seeds a new chain, which then
    grows forward only: the first unvisited battery wired to the chain's tail is
    appended until none is left. Branching battery layouts therefore produce
    chains that depend on visiting order.

    Args:
        graph: GraphAnalyzer for the current circuit
        batteries: Batteries reachable from the load
        load: The LED or bulb the batteries feed

    Returns:
        BatteryTopology
    """
    if not batteries:
        return BatteryTopology([], 0, 0)

    candidates = {battery.id: battery for battery in batteries}
    visited = set()
    series_chains = []

    for start in batteries:
        if start.id in visited:
            continue

        chain = [start]
        visited.add(start.id)
        tail = start

        while True:
            following = None
            for neighbor_id in graph.neighbors(tail.id):
                neighbor = candidates.get(neighbor_id)
                if neighbor is not None and neighbor_id not in visited:
                    following = neighbor
                    break
            if following is None:
                break
            chain.append(following)
            visited.add(following.id)
            tail = following

        series_chains.append(chain)

    parallel_count = sum(
        1 for chain in series_chains
        if any(graph.are_directly_connected(battery, load) for battery in chain)
    )

    return BatteryTopology(series_chains, chain_voltage(series_chains[0]), parallel_count)


def is_parallel_configuration(graph, led):
    """
    Classify an LED as parallel (True) or series (False).

    An LED with no other LED wired directly to it is treated as parallel and
    sees the full source voltage; one with an LED neighbor is part of a series
    string that shares the voltage.
    """
    for neighbor_id in graph.neighbors(led.id):
        neighbor = graph.component(neighbor_id)
        if neighbor is not None and neighbor.type == 'led':
            return False
    return True
