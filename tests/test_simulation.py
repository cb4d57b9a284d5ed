#!/usr/bin/env python3
"""
Tests for the tick orchestrator: end-to-end circuit scenarios, invariants that
hold across many ticks, circuit discovery and recorded runs.
"""

import unittest
import warnings
import os
import sys

import numpy as np

# Add the parent directory to the path to import voltbox
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from voltbox import CircuitSimulator, Battery, Resistor, Capacitor, LED, LightBulb, Wire
from voltbox.solver import LEDCircuit, BulbCircuit
from test_helpers import potato, chain_wires, build_simulator, run_ticks


class TestLEDScenarios(unittest.TestCase):
    """Test the reference LED circuits."""

    def test_single_potato_dim_glow(self):
        """Test one 0.9V cell lighting an LED dimly."""
        battery, led = potato(1), LED(2)
        simulator = build_simulator([battery, led], [Wire(1, 2)])

        simulator.simulate(0.1)

        self.assertGreater(led.brightness, 0)
        self.assertLess(led.brightness, 0.2)
        self.assertAlmostEqual(led.current, 0.009)

    def test_three_potatoes_in_series(self):
        """Test that three cells in series give 2.7V and a brighter LED."""
        single_led = LED(10)
        build_simulator([potato(11), single_led], [Wire(11, 10)]).simulate(0.1)

        led = LED(4)
        simulator = build_simulator([potato(1), potato(2), potato(3), led], chain_wires(1, 2, 3, 4))
        simulator.simulate(0.1)

        self.assertAlmostEqual(led.voltage, 2.7, places=6)
        self.assertGreater(led.brightness, single_led.brightness)

    def test_resistor_limits_current(self):
        """Test 9V through 470 ohm, and 9V straight into the LED."""
        battery, resistor, led = Battery(1, voltage=9.0), Resistor(2, resistance=470), LED(3)
        simulator = build_simulator([battery, resistor, led], chain_wires(1, 2, 3))
        simulator.simulate(0.1)

        self.assertGreater(led.current, 0.010)
        self.assertLess(led.current, 0.020)
        self.assertGreater(led.brightness, 0.4)
        self.assertAlmostEqual(resistor.current, led.current)

        battery, led = Battery(1, voltage=9.0), LED(2)
        simulator = build_simulator([battery, led], [Wire(1, 2)])
        simulator.simulate(0.1)

        self.assertAlmostEqual(led.current, 0.020)

    def test_capacitor_in_parallel_with_led(self):
        """Test a capacitor on its own branch off the battery (smoothing)."""
        battery = potato(1)
        led = LED(2)
        capacitor = Capacitor(3, capacitance=0.001)
        simulator = build_simulator([battery, led, capacitor], [Wire(1, 2), Wire(1, 3)])

        simulator.simulate(0.1)
        first_voltage = capacitor.voltage
        simulator.simulate(0.1)

        self.assertGreater(led.brightness, 0.3)
        self.assertGreater(capacitor.voltage, first_voltage)

        # Several ticks later the LED is still lit
        run_ticks(simulator, 5)
        self.assertGreater(led.brightness, 0.3)

    def test_capacitor_in_series_blocks_dc(self):
        """Test that a capacitor between battery and LED charges and blocks it."""
        battery = potato(1)
        capacitor = Capacitor(2, capacitance=0.001)
        led = LED(3)
        simulator = build_simulator([battery, capacitor, led], chain_wires(1, 2, 3))

        simulator.simulate(0.1)

        self.assertGreater(capacitor.voltage, 0.8)
        self.assertEqual(led.brightness, 0)

    def test_charged_capacitor_powers_led(self):
        """Test capacitor-only discharge mode."""
        capacitor = Capacitor(1, capacitance=0.01, voltage=3.0)
        led = LED(2)
        simulator = build_simulator([capacitor, led], [Wire(1, 2)])

        simulator.simulate(0.1)
        self.assertEqual(led.brightness, 1)
        self.assertLess(capacitor.voltage, 3.0)

        # The capacitor eventually runs down and the LED goes dark
        run_ticks(simulator, 50)
        self.assertEqual(led.brightness, 0)

    def test_series_led_string(self):
        """Test a 9V battery driving three LEDs in series."""
        battery = Battery(1, voltage=9.0)
        leds = [LED(2), LED(3), LED(4)]
        simulator = build_simulator([battery] + leds, chain_wires(1, 2, 3, 4))

        simulator.simulate(0.1)

        for led in leds:
            self.assertAlmostEqual(led.voltage, 3.0)
            self.assertGreater(led.brightness, 0)

    def test_parallel_leds_each_get_full_voltage(self):
        battery = Battery(1, voltage=3.0)
        led1, led2 = LED(2), LED(3)
        simulator = build_simulator([battery, led1, led2], [Wire(1, 2), Wire(1, 3)])

        simulator.simulate(0.1)

        self.assertAlmostEqual(led1.voltage, 3.0)
        self.assertAlmostEqual(led2.voltage, 3.0)
        self.assertEqual(led1.brightness, led2.brightness)


class TestLightBulbScenarios(unittest.TestCase):
    """Test bulbs through the full tick."""

    def test_bulb_lights_with_enough_voltage(self):
        battery = Battery(1, voltage=4.5)
        bulb = LightBulb(2, resistance=50)
        simulator = build_simulator([battery, bulb], [Wire(1, 2)])

        simulator.simulate()

        self.assertGreater(bulb.brightness, 0)
        self.assertAlmostEqual(bulb.voltage, 4.5)
        self.assertGreater(bulb.current, 0)

    def test_potato_too_weak_for_bulb(self):
        bulb = LightBulb(2, resistance=50)
        simulator = build_simulator([potato(1), bulb], [Wire(1, 2)])

        simulator.simulate()

        self.assertEqual(bulb.brightness, 0)

    def test_bulb_draws_more_current_than_led(self):
        led_battery, led = Battery(1, voltage=4.5), LED(2)
        bulb_battery, bulb = Battery(3, voltage=4.5), LightBulb(4, resistance=50)
        simulator = build_simulator([led_battery, led, bulb_battery, bulb], [Wire(1, 2), Wire(3, 4)])

        simulator.simulate()

        self.assertGreater(bulb.current, led.current)
        self.assertLess(bulb_battery.charge, led_battery.charge)


class TestInvariants(unittest.TestCase):
    """Test properties that must hold on every tick."""

    def test_monotonic_battery_depletion(self):
        """Test that charge never rises and never drops below zero."""
        battery = Battery(1, voltage=3.0)
        resistor = Resistor(2, resistance=47)
        led = LED(3)
        capacitor = Capacitor(4, capacitance=0.05, max_voltage=5.0)
        simulator = build_simulator(
            [battery, resistor, led, capacitor],
            [Wire(1, 2), Wire(2, 3), Wire(1, 4)]
        )

        previous = battery.charge
        for _ in range(100):
            simulator.simulate(0.1)
            self.assertLessEqual(battery.charge, previous)
            self.assertGreaterEqual(battery.charge, 0)
            previous = battery.charge

    def test_dead_battery_stays_dead(self):
        """Test clamping at zero under a very heavy load."""
        batteries = [potato(1), potato(2), potato(3)]
        bulb = LightBulb(4, resistance=0.001)
        simulator = build_simulator(batteries + [bulb], chain_wires(1, 2, 3, 4))

        run_ticks(simulator, 5)

        for battery in batteries:
            self.assertEqual(battery.charge, 0)
        self.assertEqual(bulb.brightness, 0)

        run_ticks(simulator, 5)
        for battery in batteries:
            self.assertEqual(battery.charge, 0)

    def test_voltage_and_brightness_bounds(self):
        """Test clamping of capacitor voltage and light brightness."""
        battery = Battery(1, voltage=9.0)
        capacitor = Capacitor(2, capacitance=0.001, max_voltage=5.0)
        led = LED(3)
        bulb = LightBulb(4, resistance=5)
        simulator = build_simulator(
            [battery, capacitor, led, bulb],
            [Wire(1, 2), Wire(1, 3), Wire(1, 4)]
        )

        for _ in range(30):
            simulator.simulate(0.1)
            self.assertGreaterEqual(capacitor.voltage, 0)
            self.assertLessEqual(capacitor.voltage, 5.0)
            for light in (led, bulb):
                self.assertGreaterEqual(light.brightness, 0)
                self.assertLessEqual(light.brightness, 1)

    def test_series_chain_batteries_drain_equally(self):
        batteries = [potato(1), potato(2), potato(3)]
        led = LED(4)
        simulator = build_simulator(batteries + [led], chain_wires(1, 2, 3, 4))

        run_ticks(simulator, 20)

        self.assertLess(batteries[0].charge, 1.0)
        self.assertAlmostEqual(batteries[0].charge, batteries[1].charge, places=9)
        self.assertAlmostEqual(batteries[1].charge, batteries[2].charge, places=9)

    def test_longer_parallel_chain_drains_faster(self):
        """Test b1-b2-b3-led, b4-b5-led, b6-led."""
        batteries = [potato(i) for i in range(1, 7)]
        led = LED(7)
        wires = [Wire(1, 2), Wire(2, 3), Wire(3, 7), Wire(4, 5), Wire(5, 7), Wire(6, 7)]
        simulator = build_simulator(batteries + [led], wires)

        run_ticks(simulator, 10, delta_time=0.01)

        b1, b2, b3, b4, b5, b6 = batteries
        self.assertAlmostEqual(b1.charge, b2.charge, places=5)
        self.assertAlmostEqual(b2.charge, b3.charge, places=5)
        self.assertAlmostEqual(b4.charge, b5.charge, places=5)
        self.assertLess(b1.charge, b4.charge)
        self.assertLess(b4.charge, b6.charge)

    def test_transient_state_recomputed(self):
        """Test that brightness does not linger after a wire is removed."""
        battery, resistor, led = Battery(1, voltage=9.0), Resistor(2, resistance=220), LED(3)
        simulator = build_simulator([battery, resistor, led], chain_wires(1, 2, 3))
        simulator.simulate(0.1)
        self.assertGreater(led.brightness, 0)

        simulator.set_wires([Wire(1, 2)])
        simulator.simulate(0.1)

        self.assertEqual(led.brightness, 0)
        self.assertEqual(led.current, 0)
        self.assertEqual(resistor.current, 0)
        self.assertEqual(resistor.voltage_drop, 0)


class TestCircuitSimulator(unittest.TestCase):
    """Test simulator plumbing: records, discovery, reset and helpers."""

    def test_dict_records(self):
        """Test that the UI's plain records are accepted."""
        simulator = CircuitSimulator()
        simulator.set_components([
            {'id': 1, 'type': 'battery', 'charge': 1.0, 'voltage': 0.9, 'x': 100, 'y': 100},
            {'id': 2, 'type': 'led', 'brightness': 0, 'x': 200, 'y': 100},
        ])
        simulator.set_wires([{'id': 3, 'from': 1, 'to': 2}])

        components = simulator.simulate()
        led = simulator.get_component(2)

        self.assertIs(components[1], led)
        self.assertGreater(led.brightness, 0)
        self.assertEqual(led.to_dict()['x'], 200)

    def test_dict_records_are_not_mutated(self):
        """Test that results land on the converted objects, not the caller's dicts."""
        battery_record = {'id': 1, 'type': 'battery', 'charge': 1.0, 'voltage': 4.5}
        led_record = {'id': 2, 'type': 'led', 'brightness': 0}
        simulator = CircuitSimulator()
        simulator.set_components([battery_record, led_record])
        simulator.set_wires([(1, 2)])

        simulator.simulate()

        self.assertEqual(battery_record['charge'], 1.0)
        self.assertEqual(led_record['brightness'], 0)
        self.assertLess(simulator.get_component(1).charge, 1.0)
        self.assertGreater(simulator.get_component(2).brightness, 0)

    def test_constructor_arguments(self):
        simulator = CircuitSimulator([potato(1), LED(2)], [Wire(1, 2)], delta_time=0.05)
        self.assertEqual(simulator.delta_time, 0.05)
        self.assertEqual(len(simulator.find_circuits()), 1)

    def test_find_circuits(self):
        """Test discovery of LED and bulb circuits."""
        battery = Battery(1, voltage=4.5)
        led1, led2 = LED(2), LED(3)
        bulb = LightBulb(4)
        lonely_led = LED(5)
        weak_cap = Capacitor(6, voltage=0.05)
        simulator = build_simulator(
            [battery, led1, led2, bulb, lonely_led, weak_cap],
            [Wire(1, 2), Wire(2, 3), Wire(1, 4), Wire(5, 6)]
        )

        circuits = simulator.find_circuits()

        led_circuits = [c for c in circuits if isinstance(c, LEDCircuit)]
        bulb_circuits = [c for c in circuits if isinstance(c, BulbCircuit)]
        self.assertEqual([c.led for c in led_circuits], [led1, led2])
        self.assertEqual(led_circuits[0].total_leds, 2)
        self.assertFalse(led_circuits[0].is_parallel)
        self.assertEqual(len(bulb_circuits), 1)
        self.assertIs(bulb_circuits[0].load, bulb)
        self.assertEqual(bulb_circuits[0].topology.parallel_count, 1)

    def test_wire_to_missing_component(self):
        """Test that a dangling wire does not break the tick."""
        battery, led = potato(1), LED(2)
        simulator = build_simulator([battery, led], [Wire(1, 2), Wire(2, 99)])

        simulator.simulate(0.1)

        self.assertGreater(led.brightness, 0)

    def test_reset_circuit(self):
        battery, led = potato(1), LED(2)
        simulator = build_simulator([battery, led], [Wire(1, 2)])
        run_ticks(simulator, 10)

        fresh = simulator.reset_circuit(simulator.components)

        self.assertLess(battery.charge, 1.0)
        self.assertGreater(led.brightness, 0)
        self.assertEqual(fresh[0].charge, 1.0)
        self.assertEqual(fresh[1].brightness, 0)
        self.assertEqual(simulator.reset_circuit(fresh), fresh)

    def test_non_positive_tick_warns(self):
        simulator = build_simulator([potato(1), LED(2)], [Wire(1, 2)])
        with self.assertWarns(UserWarning):
            simulator.simulate(0)

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            simulator.simulate(0.1)

    def test_helper_formulas(self):
        self.assertAlmostEqual(CircuitSimulator.voltage_divider(9.0, 1000, 2000), 6.0)
        self.assertAlmostEqual(CircuitSimulator.rc_charge(5.0, 1000, 0.001, 1.0), 5.0 * (1 - np.exp(-1)))
        self.assertAlmostEqual(CircuitSimulator.power(9.0, 0.02), 0.18)

    def test_query_delegation(self):
        battery, resistor, led = potato(1), Resistor(2), LED(3)
        simulator = build_simulator([battery, resistor, led], chain_wires(1, 2, 3))

        self.assertEqual(simulator.neighbors(2), [1, 3])
        self.assertTrue(simulator.are_directly_connected(battery, resistor))
        self.assertEqual(simulator.reachable(led), [led, resistor, battery])
        self.assertEqual(simulator.reachable_batteries(led), [battery])
        self.assertEqual(simulator.resistors_in_path(led, [battery]), [resistor])
        self.assertTrue(simulator.is_parallel_configuration(led))
        self.assertEqual(simulator.analyze_battery_topology([battery], led).parallel_count, 0)


class TestSimulationRun(unittest.TestCase):
    """Test recording several ticks."""

    def setUp(self):
        self.capacitor = Capacitor(1, capacitance=0.01, voltage=3.0)
        self.resistor = Resistor(2, resistance=100)
        self.simulator = build_simulator([self.capacitor, self.resistor], [Wire(1, 2)])

    def test_run_records_traces(self):
        run = self.simulator.run(10, delta_time=0.1)

        np.testing.assert_allclose(run.get_time_vector(), np.arange(1, 11) * 0.1)
        trace = run.get_trace(1)
        self.assertEqual(len(trace), 10)
        self.assertTrue(np.all(np.diff(trace) < 0))
        self.assertAlmostEqual(trace[-1], self.capacitor.voltage)
        self.assertGreater(trace[-1], 0.9)
        self.assertLess(trace[-1], 1.5)

    def test_unknown_trace(self):
        run = self.simulator.run(2)
        with self.assertRaises(ValueError):
            run.get_trace(42)

    def test_plot(self):
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt

        run = self.simulator.run(5)
        ax = run.plot()

        self.assertEqual(len(ax.lines), 2)
        self.assertEqual(ax.get_xlabel(), 'Time (s)')
        plt.close('all')


if __name__ == '__main__':
    unittest.main()
