"""
RC charge, discharge and leakage of capacitors over one tick.
"""

import numpy as np


WIRE_RESISTANCE = 10            # ohms, always in series with the capacitor
LEAKAGE_RESISTANCE = 10e6       # 10 Mohm self-discharge path when disconnected
DEFAULT_CAPACITANCE = 0.001     # 1 mF
DEFAULT_MAX_VOLTAGE = 10.0
BATTERY_DRAIN_SCALE = 0.001     # empirical: keeps charge depletion visible


def capacitance_of(capacitor):
    return capacitor.capacitance or DEFAULT_CAPACITANCE


def max_voltage_of(capacitor):
    return capacitor.max_voltage or DEFAULT_MAX_VOLTAGE


def update_capacitor(capacitor, graph, delta_time):
    """
    Advance one capacitor by ``delta_time`` seconds.

    With a battery reachable the capacitor charges toward the summed voltage of
    the charged batteries, draining them in proportion to the charging current.
    Without a battery it decays through any reachable resistors, or through the
    leakage resistance when nothing at all is connected.
    """
    if capacitor.voltage is None:
        capacitor.voltage = 0

    connected = graph.reachable(capacitor)
    batteries = [c for c in connected if c.type == 'battery']
    resistors = [c for c in connected if c.type == 'resistor']

    total_resistance = WIRE_RESISTANCE + sum(r.resistance for r in resistors)
    capacitance = capacitance_of(capacitor)

    if batteries:
        source_voltage = sum(b.effective_voltage for b in batteries)
        time_constant = total_resistance * capacitance
        delta_v = (source_voltage - capacitor.voltage) * (1 - np.exp(-delta_time / time_constant))
        capacitor.voltage += delta_v

        charging_current = delta_v / total_resistance / delta_time
        # A capacitor above the source voltage never recharges the batteries
        drain = max(0.0, charging_current * delta_time * BATTERY_DRAIN_SCALE / len(batteries))
        for battery in batteries:
            battery.charge = max(0.0, battery.charge - drain)

    elif resistors and capacitor.voltage > 0:
        time_constant = total_resistance * capacitance
        capacitor.voltage *= np.exp(-delta_time / time_constant)

    elif capacitor.voltage > 0:
        time_constant = LEAKAGE_RESISTANCE * capacitance
        capacitor.voltage *= np.exp(-delta_time / time_constant)

    capacitor.voltage = float(np.clip(capacitor.voltage, 0, max_voltage_of(capacitor)))


def simulate_capacitors(components, graph, delta_time):
    """Run the RC update for every capacitor in ``components``."""
    for component in components:
        if component.type == 'capacitor':
            update_capacitor(component, graph, delta_time)
