"""
Voltbox: the simulation engine behind an educational circuit sandbox.

Batteries, resistors, capacitors, LEDs and light bulbs are wired together and
advanced on a fixed tick; each tick recomputes the voltage, current and
brightness every component sees.
"""

from .components import Component, Battery, Resistor, Capacitor, LED, LightBulb, Wire, component_from_dict, wire_from_dict, reset_circuit
from .graph import GraphAnalyzer
from .topology import BatteryTopology, analyze_battery_topology, is_parallel_configuration
from .capacitors import simulate_capacitors
from .solver import LEDCircuit, BulbCircuit, solve_led_circuit, solve_lightbulb_circuit
from .simulation import CircuitSimulator, SimulationRun, SimulationState
from .visual import get_battery_visual_state, get_led_visual_state, get_resistor_visual_state, get_capacitor_visual_state, get_lightbulb_visual_state, get_visual_state

__version__ = "0.1.0"

__all__ = [
    # Component records
    "Component", "Battery", "Resistor", "Capacitor", "LED", "LightBulb", "Wire",
    "component_from_dict", "wire_from_dict", "reset_circuit",
    # Topology analysis
    "GraphAnalyzer", "BatteryTopology", "analyze_battery_topology", "is_parallel_configuration",
    # Physics
    "simulate_capacitors", "LEDCircuit", "BulbCircuit", "solve_led_circuit", "solve_lightbulb_circuit",
    # Simulation
    "CircuitSimulator", "SimulationRun", "SimulationState",
    # Visual state
    "get_battery_visual_state", "get_led_visual_state", "get_resistor_visual_state",
    "get_capacitor_visual_state", "get_lightbulb_visual_state", "get_visual_state",
]
