"""
Graph queries over the component/wire network.

The circuit is an undirected multigraph: components are nodes, wires are edges.
It may be disconnected and may contain cycles.
"""

from collections import deque

import networkx as nx


class GraphAnalyzer:
    """
    Read-only connectivity queries for one (components, wires) snapshot.

    The analyzer holds no incremental-update logic; build a new one whenever the
    component list or the wire list changes.
    """

    def __init__(self, components, wires):
        self.components = list(components)
        self.wires = list(wires)
        self._by_id = {component.id: component for component in self.components}

        self._graph = nx.MultiGraph()
        self._graph.add_nodes_from(self._by_id)
        # Wires may name ids that are not components; those nodes are kept so
        # neighbor lookups still report them, but traversals never expand them.
        for wire in self.wires:
            self._graph.add_edge(wire.source, wire.target)

    @property
    def graph(self):
        """The underlying networkx MultiGraph."""
        return self._graph

    def component(self, component_id):
        """Look up a component by id, or None when no such component exists."""
        return self._by_id.get(component_id)

    def components_of_type(self, comp_type):
        return [c for c in self.components if c.type == comp_type]

    def neighbors(self, component_id):
        """
        Get the ids of everything joined to ``component_id`` by a wire.

        Wire direction is ignored. Ids are reported once each, in the order
        their first wire was added.
        """
        if component_id not in self._graph:
            return []
        return list(self._graph.neighbors(component_id))

    def are_directly_connected(self, a, b):
        """True if some wire joins components (or ids) ``a`` and ``b``."""
        a_id = getattr(a, 'id', a)
        b_id = getattr(b, 'id', b)
        return self._graph.has_edge(a_id, b_id)

    def _bfs(self, start, expand=None):
        """
        Breadth-first walk from ``start`` yielding components in discovery order.

        Args:
            start: Component to start from
            expand: Optional predicate; components for which it returns False are
                    yielded but their neighbors are not queued
        """
        visited = {start.id}
        queue = deque([start.id])

        while queue:
            current = self._by_id.get(queue.popleft())
            if current is None:
                continue

            yield current

            if expand is not None and not expand(current):
                continue

            for neighbor_id in self.neighbors(current.id):
                if neighbor_id not in visited:
                    visited.add(neighbor_id)
                    queue.append(neighbor_id)

    def reachable(self, start):
        """
        Find every component in ``start``'s connected piece of the circuit.

        Returns:
            list: Components in BFS discovery order, ``start`` first
        """
        return list(self._bfs(start))

    def reachable_batteries(self, load):
        """Find all batteries reachable from ``load`` (batteries do not block the walk)."""
        return [c for c in self._bfs(load) if c.type == 'battery']

    def resistors_in_path(self, load, batteries):
        """
        Find the resistors between ``load`` and its batteries.

        The walk starts at the load and stops at every battery, collecting each
        resistor seen on the way. This is a reachability set rather than a single
        path, so with parallel branches a resistor may be attributed to more than
        one load.
        """
        if not batteries:
            return []
        return [c for c in self._bfs(load, expand=lambda c: c.type != 'battery')
                if c.type == 'resistor']

    def capacitor_in_series_with_led(self, capacitor, led, batteries):
        """
        Decide whether ``capacitor`` sits between the batteries and ``led``.

        Only the first battery is used as the search origin. The capacitor counts
        as in series when it lies on the breadth-first path from that battery to
        the LED; otherwise (including when there is no path) it is treated as a
        parallel branch.
        """
        if not batteries:
            return False

        origin = batteries[0].id
        if origin not in self._graph or led.id not in self._graph:
            return False

        paths = nx.single_source_shortest_path(self._graph, origin)
        path = paths.get(led.id)
        if path is None:
            return False

        return capacitor.id in path[1:]

    def __repr__(self):
        return f"GraphAnalyzer({len(self.components)} components, {len(self.wires)} wires)"
