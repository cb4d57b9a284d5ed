"""
Tick orchestration for the sandbox engine.

CircuitSimulator owns the component and wire lists, advances them one tick at a
time and hands back the mutated components. SimulationRun records several ticks
for inspection and plotting; SimulationState is the running/stopped flag an
external timer consults.
"""

import warnings

import numpy as np

from .capacitors import simulate_capacitors
from .components import as_component, as_wire, reset_circuit
from .graph import GraphAnalyzer
from .solver import BulbCircuit, LEDCircuit, solve_led_circuit, solve_lightbulb_circuit
from .topology import analyze_battery_topology, is_parallel_configuration
from .visual import (
    get_battery_visual_state,
    get_capacitor_visual_state,
    get_led_visual_state,
    get_lightbulb_visual_state,
    get_resistor_visual_state,
    get_visual_state,
)

# Capacitors below this voltage are not treated as sources for LEDs and bulbs
CAPACITOR_SOURCE_THRESHOLD = 0.1
DEFAULT_DELTA_TIME = 0.1

# Quantity recorded per component type by CircuitSimulator.run()
TRACE_FIELDS = {
    'battery': 'charge',
    'resistor': 'current',
    'capacitor': 'voltage',
    'led': 'brightness',
    'lightbulb': 'brightness',
}


class CircuitSimulator:
    """
    Fixed-tick simulator for a sandbox circuit.

    Components and wires may be given as objects or as the plain dict records
    used by the UI layer. Dict records are converted into new Component objects
    and the dicts themselves are left untouched. All mutation happens in place
    on the component objects held by the simulator, which are also what
    ``simulate()`` returns.

    Example:
        >>> sim = CircuitSimulator()
        >>> sim.set_components([Battery(1), LED(2)])
        >>> sim.set_wires([Wire(1, 2)])
        >>> components = sim.simulate(0.1)
    """

    def __init__(self, components=None, wires=None, delta_time=DEFAULT_DELTA_TIME):
        self.components = [as_component(c) for c in (components or [])]
        self.wires = [as_wire(w) for w in (wires or [])]
        self.delta_time = delta_time
        self.graph = GraphAnalyzer(self.components, self.wires)

    def set_components(self, components):
        """
        Replace the component list and rebuild the connectivity graph.

        Component objects are held as given and updated in place. Dict records
        are converted into new Component objects; the caller's dicts are never
        written to, so results must be read from ``self.components``,
        ``get_component()`` or the list returned by ``simulate()``.
        """
        self.components = [as_component(c) for c in components]
        self.graph = GraphAnalyzer(self.components, self.wires)

    def set_wires(self, wires):
        """Replace the wire list and rebuild the connectivity graph."""
        self.wires = [as_wire(w) for w in wires]
        self.graph = GraphAnalyzer(self.components, self.wires)

    def get_component(self, component_id):
        return self.graph.component(component_id)

    def reset_circuit(self, components):
        """
        Return fresh copies of ``components`` in their initial electrical state.

        Batteries are full, capacitors empty, resistors, LEDs and bulbs zeroed.
        The input list and its components are left untouched.
        """
        return reset_circuit(components)

    def simulate(self, delta_time=None):
        """
        Advance the circuit by one tick.

        Args:
            delta_time: Tick length in seconds (defaults to the simulator's delta_time)

        Returns:
            list: The simulator's components, updated in place
        """
        if delta_time is None:
            delta_time = self.delta_time
        if delta_time <= 0:
            warnings.warn(
                f"Non-positive tick length {delta_time}; capacitor and battery "
                "updates may produce NaN or infinite values.",
                UserWarning,
                stacklevel=2
            )

        for component in self.components:
            component.clear_transient()

        # Capacitors first so the solvers see this tick's charge state
        simulate_capacitors(self.components, self.graph, delta_time)

        for circuit in self.find_circuits():
            if circuit.type == 'led':
                solve_led_circuit(circuit, self.graph, delta_time)
            elif circuit.type == 'lightbulb':
                solve_lightbulb_circuit(circuit, delta_time)

        return self.components

    def find_circuits(self):
        """
        Discover the circuit feeding every LED and every bulb.

        A load is only part of a circuit when at least one battery or charged
        capacitor is reachable from it. A source reachable from several loads
        appears in each of their circuits.

        Returns:
            list: LEDCircuit objects followed by BulbCircuit objects
        """
        circuits = []

        for led in self.graph.components_of_type('led'):
            connected = self.graph.reachable(led)
            batteries = [c for c in connected if c.type == 'battery']
            capacitors = self._charged_capacitors(connected)
            if batteries or capacitors:
                total_leds = sum(1 for c in connected if c.type == 'led')
                circuits.append(LEDCircuit(
                    led,
                    batteries=batteries,
                    capacitors=capacitors,
                    total_leds=total_leds,
                    is_parallel=self.is_parallel_configuration(led),
                ))

        for bulb in self.graph.components_of_type('lightbulb'):
            connected = self.graph.reachable(bulb)
            batteries = [c for c in connected if c.type == 'battery']
            capacitors = self._charged_capacitors(connected)
            if batteries or capacitors:
                circuits.append(BulbCircuit(
                    bulb,
                    batteries=batteries,
                    capacitors=capacitors,
                    topology=self.analyze_battery_topology(batteries, bulb),
                ))

        return circuits

    @staticmethod
    def _charged_capacitors(connected):
        return [c for c in connected
                if c.type == 'capacitor' and c.voltage > CAPACITOR_SOURCE_THRESHOLD]

    def run(self, ticks, delta_time=None):
        """
        Advance ``ticks`` ticks, recording every component after each one.

        Args:
            ticks: Number of ticks to simulate
            delta_time: Tick length in seconds (defaults to the simulator's delta_time)

        Returns:
            SimulationRun: Time vector and per-component traces
        """
        if delta_time is None:
            delta_time = self.delta_time

        time = np.arange(1, ticks + 1) * delta_time
        traces = {c.id: np.zeros(ticks) for c in self.components}

        for step in range(ticks):
            self.simulate(delta_time)
            for component in self.components:
                traces[component.id][step] = getattr(component, TRACE_FIELDS[component.type])

        return SimulationRun(self.components, time, traces)

    # Graph queries

    def neighbors(self, component_id):
        return self.graph.neighbors(component_id)

    def are_directly_connected(self, a, b):
        return self.graph.are_directly_connected(a, b)

    def reachable(self, start):
        return self.graph.reachable(start)

    def reachable_batteries(self, load):
        return self.graph.reachable_batteries(load)

    def resistors_in_path(self, load, batteries):
        return self.graph.resistors_in_path(load, batteries)

    def capacitor_in_series_with_led(self, capacitor, led, batteries):
        return self.graph.capacitor_in_series_with_led(capacitor, led, batteries)

    def analyze_battery_topology(self, batteries, load):
        return analyze_battery_topology(self.graph, batteries, load)

    def is_parallel_configuration(self, led):
        return is_parallel_configuration(self.graph, led)

    # Visual state

    def get_battery_visual_state(self, battery):
        return get_battery_visual_state(battery)

    def get_led_visual_state(self, led):
        return get_led_visual_state(led)

    def get_resistor_visual_state(self, resistor):
        return get_resistor_visual_state(resistor)

    def get_capacitor_visual_state(self, capacitor):
        return get_capacitor_visual_state(capacitor)

    def get_lightbulb_visual_state(self, bulb):
        return get_lightbulb_visual_state(bulb)

    def get_visual_state(self, component):
        return get_visual_state(component)

    # Helper formulas

    @staticmethod
    def voltage_divider(vin, r1, r2):
        return vin * r2 / (r1 + r2)

    @staticmethod
    def rc_charge(v, r, c, t):
        """Capacitor voltage after charging toward ``v`` for ``t`` seconds."""
        return v * (1 - np.exp(-t / (r * c)))

    @staticmethod
    def power(v, i):
        return v * i

    def __repr__(self):
        return f"CircuitSimulator({len(self.components)} components, {len(self.wires)} wires)"


class SimulationRun:
    """
    Recorded history of several ticks.

    Each component id maps to an array of its primary quantity after every tick:
    charge for batteries, current for resistors, voltage for capacitors and
    brightness for LEDs and bulbs.
    """

    def __init__(self, components, time, traces):
        self.final_components = components
        self.time = time
        self.traces = traces

    def get_time_vector(self):
        """
        Get the simulated time after each tick.

        Returns:
            numpy.ndarray: Time values in seconds
        """
        return self.time

    def get_trace(self, component_id):
        """Get the recorded values for one component."""
        if component_id not in self.traces:
            raise ValueError(f"Component {component_id!r} was not part of this run")
        return self.traces[component_id]

    def plot(self, component_ids=None, ax=None):
        """
        Plot recorded traces against time.

        Args:
            component_ids: Ids to plot (default: every component)
            ax: Existing matplotlib Axes to draw on (default: a new figure)

        Returns:
            The matplotlib Axes that was drawn on
        """
        import matplotlib.pyplot as plt

        if ax is None:
            _, ax = plt.subplots(figsize=(10, 6))

        by_id = {c.id: c for c in self.final_components}
        for component_id in (component_ids if component_ids is not None else self.traces):
            component = by_id.get(component_id)
            field = TRACE_FIELDS[component.type] if component is not None else 'value'
            ax.plot(self.time, self.get_trace(component_id), label=f"{component_id} {field}")

        ax.set_xlabel('Time (s)')
        ax.grid(True, alpha=0.3)
        ax.legend()
        return ax

    def __repr__(self):
        return f"SimulationRun({len(self.time)} ticks, {len(self.traces)} components)"


class SimulationState:
    """
    Running/stopped flag for the external tick timer.

    Listeners registered with ``on_change`` are called with the new running
    flag whenever it actually changes.
    """

    def __init__(self):
        self.running = False
        self.callbacks = []

    def is_running(self):
        return self.running

    def start(self):
        if self.running:
            return
        self.running = True
        self._notify_listeners()

    def stop(self):
        if not self.running:
            return
        self.running = False
        self._notify_listeners()

    def toggle(self):
        if self.running:
            self.stop()
        else:
            self.start()

    def on_change(self, callback):
        self.callbacks.append(callback)

    def _notify_listeners(self):
        for callback in self.callbacks:
            callback(self.running)
