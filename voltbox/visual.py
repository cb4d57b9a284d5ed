"""
Visual state projections for rendering components.

Each function maps a component's physical state to a small dict holding a
bucketed ``state`` label plus continuous values for the renderer. They are not
guarded against a missing component: passing None raises.
"""


def get_battery_visual_state(battery):
    charge = battery.charge

    if charge > 0.75:
        state = 'full'
    elif charge > 0.5:
        state = 'medium'
    elif charge > 0.25:
        state = 'low'
    elif charge > 0:
        state = 'depleted'
    else:
        state = 'dead'

    return {
        'charge_percent': round(charge * 100),
        'charge_bar_fill': charge,
        'state': state,
        'glow_intensity': charge * 0.5,
    }


def get_led_visual_state(led):
    brightness = led.brightness or 0

    if brightness == 0:
        state = 'off'
    elif brightness < 0.4:
        state = 'dim'
    elif brightness < 0.8:
        state = 'medium'
    else:
        state = 'bright'

    return {
        'brightness': brightness,
        'brightness_percent': round(brightness * 100),
        'glow_intensity': brightness,
        'glow_radius': 5 + brightness * 15,  # pixels
        'state': state,
    }


def get_resistor_visual_state(resistor):
    """
    Heat is power dissipated (I^2 R) scaled so that 2W and above is the
    maximum heat level.
    """
    current = resistor.current or 0
    resistance = resistor.resistance or 0
    power_dissipated = current * current * resistance
    heat_level = min(power_dissipated / 2.0, 1.0)

    if heat_level < 0.25:
        state = 'cool'
    elif heat_level < 0.6:
        state = 'warm'
    elif heat_level < 0.9:
        state = 'hot'
    else:
        state = 'overheating'

    return {
        'power_dissipated': power_dissipated,
        'heat_level': heat_level,
        'state': state,
        'voltage_drop': resistor.voltage_drop or 0,
        'current': current,
    }


def get_capacitor_visual_state(capacitor):
    voltage = capacitor.voltage or 0
    max_voltage = capacitor.max_voltage or 5.0
    fill = voltage / max_voltage

    if fill < 0.1:
        state = 'empty'
    elif fill < 0.5:
        state = 'charging'
    elif fill < 0.9:
        state = 'charged'
    else:
        state = 'full'

    return {
        'charge_percent': round(fill * 100),
        'charge_fill': fill,
        'state': state,
        'voltage': voltage,
        'max_voltage': max_voltage,
    }


def get_lightbulb_visual_state(bulb):
    brightness = bulb.brightness or 0
    power = bulb.power or 0

    if brightness == 0:
        state = 'off'
    elif brightness < 0.3:
        state = 'dim'
    elif brightness < 0.7:
        state = 'warm'
    else:
        state = 'bright'

    return {
        'brightness': brightness,
        'brightness_percent': round(brightness * 100),
        'glow_intensity': brightness,
        'filament_heat': min(power / 1.0, 1.0),
        'state': state,
        'power': power,
    }


VISUAL_STATE_GETTERS = {
    'battery': get_battery_visual_state,
    'resistor': get_resistor_visual_state,
    'capacitor': get_capacitor_visual_state,
    'led': get_led_visual_state,
    'lightbulb': get_lightbulb_visual_state,
}


def get_visual_state(component):
    """Dispatch to the projection matching ``component.type``."""
    return VISUAL_STATE_GETTERS[component.type](component)
