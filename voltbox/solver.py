"""
Branch solvers: compute current, voltage and brightness for one LED or bulb
circuit and apply the resulting battery drain and capacitor discharge.
"""

from .capacitors import BATTERY_DRAIN_SCALE, capacitance_of
from .topology import analyze_battery_topology, chain_voltage


LED_RESISTANCE = 100            # ohms, internal resistance of every LED
LED_FORWARD_VOLTAGE = 2.0
LED_MIN_VOLTAGE = 0.5           # below this an LED stays dark
MAX_LED_CURRENT = 0.020         # 20 mA

BULB_MIN_VOLTAGE = 2.5          # minimum for a visible glow
BULB_DIM_VOLTAGE = 4.0
BULB_FULL_POWER = 1.0           # watts for full brightness
DEFAULT_BULB_RESISTANCE = 50


class LEDCircuit:
    """Sources and neighborhood discovered for one LED."""

    type = 'led'

    def __init__(self, led, batteries=None, capacitors=None, total_leds=1, is_parallel=True):
        self.led = led
        self.batteries = list(batteries or [])
        self.capacitors = list(capacitors or [])
        self.total_leds = total_leds
        self.is_parallel = is_parallel

    @property
    def load(self):
        return self.led

    def __repr__(self):
        kind = "parallel" if self.is_parallel else "series"
        return (f"LEDCircuit({self.led!r}, {len(self.batteries)} batteries, "
                f"{len(self.capacitors)} capacitors, {self.total_leds} LEDs, {kind})")


class BulbCircuit:
    """Sources discovered for one light bulb."""

    type = 'lightbulb'

    def __init__(self, bulb, batteries=None, capacitors=None, topology=None):
        self.bulb = bulb
        self.batteries = list(batteries or [])
        self.capacitors = list(capacitors or [])
        self.topology = topology

    @property
    def load(self):
        return self.bulb

    def __repr__(self):
        return (f"BulbCircuit({self.bulb!r}, {len(self.batteries)} batteries, "
                f"{len(self.capacitors)} capacitors)")


def _discharge(capacitors, current, delta_time):
    """Pull ``current`` amps from each capacitor for ``delta_time`` seconds."""
    for capacitor in capacitors:
        voltage_drop = current * delta_time / capacitance_of(capacitor)
        capacitor.voltage = max(0.0, capacitor.voltage - voltage_drop)


def solve_led_circuit(circuit, graph, delta_time):
    """
    Solve one LED branch and update the LED, its resistors and its sources.

    Args:
        circuit: LEDCircuit describing the LED and its reachable sources
        graph: GraphAnalyzer for the current circuit
        delta_time: Tick length in seconds (used for capacitor discharge)
    """
    led = circuit.led
    batteries = circuit.batteries
    capacitors = circuit.capacitors
    series_string = not circuit.is_parallel and circuit.total_leds > 1

    series_chains = analyze_battery_topology(graph, batteries, led).series_chains

    # Parallel chains are not superposed: the strongest one sets the voltage
    battery_voltage = 0
    if len(series_chains) == 1:
        battery_voltage = chain_voltage(series_chains[0])
    elif len(series_chains) > 1:
        battery_voltage = max(chain_voltage(chain) for chain in series_chains)

    total_voltage = battery_voltage
    if batteries:
        for capacitor in capacitors:
            # A series capacitor opposes the battery; a parallel one adds to it
            if graph.capacitor_in_series_with_led(capacitor, led, batteries):
                total_voltage -= capacitor.voltage
            else:
                total_voltage += capacitor.voltage
    else:
        total_voltage += sum(capacitor.voltage for capacitor in capacitors)

    resistors = graph.resistors_in_path(led, batteries)
    total_resistance = LED_RESISTANCE + sum(r.resistance for r in resistors)
    if series_string:
        total_resistance += LED_RESISTANCE * (circuit.total_leds - 1)

    available_voltage = total_voltage / circuit.total_leds if series_string else total_voltage

    if available_voltage < LED_MIN_VOLTAGE:
        led.brightness = 0
        led.voltage = available_voltage
        led.current = 0
        return

    current = min(total_voltage / total_resistance, MAX_LED_CURRENT)

    led_voltage = total_voltage
    for resistor in resistors:
        resistor.current = current
        resistor.voltage_drop = current * resistor.resistance
        led_voltage -= resistor.voltage_drop

    if series_string:
        led_voltage /= circuit.total_leds

    brightness = current / MAX_LED_CURRENT
    if led_voltage < LED_FORWARD_VOLTAGE:
        # Dim glow below forward voltage instead of a hard cutoff
        brightness *= (led_voltage / LED_FORWARD_VOLTAGE) * 0.8

    led.brightness = max(0, min(1, brightness))
    led.voltage = led_voltage
    led.current = current

    # Each parallel LED draws the branch current on its own
    multiplier = circuit.total_leds if circuit.is_parallel else 1
    total_current = current * multiplier

    if batteries:
        chain_voltages = [chain_voltage(chain) for chain in series_chains]
        total_chain_voltage = sum(chain_voltages)
        if total_chain_voltage != 0:
            for chain, voltage in zip(series_chains, chain_voltages):
                chain_current = total_current * voltage / total_chain_voltage
                drain = chain_current * BATTERY_DRAIN_SCALE / (len(capacitors) + len(series_chains))
                for battery in chain:
                    battery.charge = max(0.0, battery.charge - drain)

    # Capacitors only discharge into the LED when they are the sole source
    if capacitors and not batteries:
        _discharge(capacitors, total_current / len(capacitors), delta_time)


def solve_lightbulb_circuit(circuit, delta_time):
    """
    Solve one bulb branch and update the bulb and its sources.

    Brightness follows dissipated power (1W is full brightness), with extra
    dimming below 4V.
    """
    bulb = circuit.bulb
    batteries = circuit.batteries
    capacitors = circuit.capacitors

    if circuit.topology is not None:
        total_voltage = circuit.topology.voltage
        parallel_count = circuit.topology.parallel_count or 1
    else:
        total_voltage = chain_voltage(batteries)
        parallel_count = 1

    total_voltage += sum(capacitor.voltage for capacitor in capacitors)
    resistance = bulb.resistance or DEFAULT_BULB_RESISTANCE

    if total_voltage < BULB_MIN_VOLTAGE:
        bulb.brightness = 0
        bulb.voltage = total_voltage
        bulb.current = 0
        bulb.power = 0
        return

    current = total_voltage / resistance
    power = current * current * resistance

    brightness = min(power / BULB_FULL_POWER, 1.0)
    if total_voltage < BULB_DIM_VOLTAGE:
        brightness *= (total_voltage / BULB_DIM_VOLTAGE) * 0.7

    bulb.brightness = max(0, min(1, brightness))
    bulb.voltage = total_voltage
    bulb.current = current
    bulb.power = power

    total_sources = len(batteries) + len(capacitors)

    if batteries and circuit.topology is not None and circuit.topology.series_chains:
        # Parallel chains split the current; a chain delivers in proportion to its voltage
        series_chains = circuit.topology.series_chains
        chain_voltages = [chain_voltage(chain) for chain in series_chains]
        total_chain_voltage = sum(chain_voltages)
        for chain, voltage in zip(series_chains, chain_voltages):
            if total_chain_voltage > 0:
                fraction = voltage / total_chain_voltage
            else:
                fraction = 1.0 / len(series_chains)
            chain_current = (current / parallel_count) * fraction
            drain = chain_current * BATTERY_DRAIN_SCALE / total_sources
            for battery in chain:
                battery.charge = max(0.0, battery.charge - drain)
    elif batteries:
        drain = current * BATTERY_DRAIN_SCALE / total_sources
        for battery in batteries:
            battery.charge = max(0.0, battery.charge - drain)

    if capacitors:
        _discharge(capacitors, current / total_sources, delta_time)
