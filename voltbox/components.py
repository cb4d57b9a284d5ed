"""
Component records for the circuit sandbox: batteries, resistors, capacitors,
LEDs and incandescent light bulbs, plus the wires that join them.
"""

import copy


class Component:
    """
    Base class for all sandbox components.

    Every component carries an ``id`` that is unique within a simulation and a
    ``type`` tag (a class attribute) that the engine dispatches on. Any extra
    fields handed in by the UI layer (canvas position and so on) are kept in
    ``extra`` so they survive a round trip through the engine.
    """

    type = None

    # Maps dict keys used by the UI layer to attribute names
    _FIELDS = {}

    def __init__(self, id, **extra):
        self.id = id
        self.extra = extra

    def reset(self):
        """Return this component to its initial electrical state in place."""
        pass

    def clear_transient(self):
        """Zero the fields that are recomputed on every tick."""
        pass

    def copy(self):
        """Return an independent copy of this component."""
        return copy.deepcopy(self)

    def to_dict(self):
        """
        Convert the component to the plain dict record used by the UI layer.

        Returns:
            dict: Record with ``id``, ``type``, every electrical field and any
                  extra fields that were supplied at construction time.
        """
        record = {'id': self.id, 'type': self.type}
        for key, attr in self._FIELDS.items():
            record[key] = getattr(self, attr)
        record.update(self.extra)
        return record

    def __eq__(self, other):
        if not isinstance(other, Component):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.type, self.id))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.id!r})"


class Battery(Component):
    """Battery (a potato cell by default: 0.9V)."""

    type = 'battery'
    _FIELDS = {'charge': 'charge', 'voltage': 'voltage'}

    def __init__(self, id, voltage=0.9, charge=1.0, **extra):
        super().__init__(id, **extra)
        self.voltage = voltage
        self.charge = charge

    @property
    def effective_voltage(self):
        """Nominal voltage while charged, 0V once depleted."""
        return self.voltage if self.charge > 0 else 0

    def reset(self):
        self.charge = 1.0


class Resistor(Component):
    """Fixed resistor. ``current`` and ``voltage_drop`` are set each tick."""

    type = 'resistor'
    _FIELDS = {'resistance': 'resistance', 'current': 'current', 'voltageDrop': 'voltage_drop'}

    def __init__(self, id, resistance=100, current=0, voltage_drop=0, **extra):
        super().__init__(id, **extra)
        self.resistance = resistance
        self.current = current
        self.voltage_drop = voltage_drop

    def reset(self):
        self.clear_transient()

    def clear_transient(self):
        self.current = 0
        self.voltage_drop = 0


class Capacitor(Component):
    """
    Capacitor whose voltage persists between ticks.

    ``capacitance`` and ``max_voltage`` may be left as None; the engine then
    falls back to 1mF and 10V respectively.
    """

    type = 'capacitor'
    _FIELDS = {'capacitance': 'capacitance', 'voltage': 'voltage', 'maxVoltage': 'max_voltage'}

    def __init__(self, id, capacitance=None, voltage=0, max_voltage=None, **extra):
        super().__init__(id, **extra)
        self.capacitance = capacitance
        self.voltage = voltage
        self.max_voltage = max_voltage

    def reset(self):
        self.voltage = 0


class LED(Component):
    """Light emitting diode. All of its state is recomputed each tick."""

    type = 'led'
    _FIELDS = {'brightness': 'brightness', 'voltage': 'voltage', 'current': 'current'}

    def __init__(self, id, brightness=0, voltage=0, current=0, **extra):
        super().__init__(id, **extra)
        self.brightness = brightness
        self.voltage = voltage
        self.current = current

    def reset(self):
        self.clear_transient()

    def clear_transient(self):
        self.brightness = 0
        self.voltage = 0
        self.current = 0


class LightBulb(Component):
    """Incandescent bulb with a fixed filament resistance (50 ohm unless set)."""

    type = 'lightbulb'
    _FIELDS = {
        'resistance': 'resistance',
        'brightness': 'brightness',
        'voltage': 'voltage',
        'current': 'current',
        'power': 'power',
    }

    def __init__(self, id, resistance=50, brightness=0, voltage=0, current=0, power=0, **extra):
        super().__init__(id, **extra)
        self.resistance = resistance
        self.brightness = brightness
        self.voltage = voltage
        self.current = current
        self.power = power

    def reset(self):
        self.clear_transient()

    def clear_transient(self):
        self.brightness = 0
        self.voltage = 0
        self.current = 0
        self.power = 0


class Wire:
    """Undirected connection between two component ids."""

    def __init__(self, source, target, id=None):
        self.source = source
        self.target = target
        self.id = id

    def to_dict(self):
        record = {'from': self.source, 'to': self.target}
        if self.id is not None:
            record['id'] = self.id
        return record

    def __repr__(self):
        return f"Wire({self.source!r} -- {self.target!r})"


COMPONENT_TYPES = {cls.type: cls for cls in (Battery, Resistor, Capacitor, LED, LightBulb)}

# camelCase keys sent by the UI layer
_KEY_ALIASES = {'voltageDrop': 'voltage_drop', 'maxVoltage': 'max_voltage'}


def component_from_dict(record):
    """
    Build a component from a plain dict record.

    Args:
        record: Mapping with at least ``id`` and ``type``. Electrical fields use
                either the UI's camelCase names or the attribute names; any other
                keys are kept as extra fields.

    Returns:
        Component: Instance of the class matching ``record['type']``

    Raises:
        ValueError: If the record has no id or names an unknown component type
    """
    if 'id' not in record:
        raise ValueError(f"Component record must have an 'id', got {record!r}")

    comp_type = record.get('type')
    if comp_type not in COMPONENT_TYPES:
        raise ValueError(f"Unknown component type {comp_type!r}. "
                         f"Expected one of: {', '.join(COMPONENT_TYPES)}")

    kwargs = {}
    for key, value in record.items():
        if key in ('id', 'type'):
            continue
        kwargs[_KEY_ALIASES.get(key, key)] = value

    return COMPONENT_TYPES[comp_type](record['id'], **kwargs)


def wire_from_dict(record):
    """Build a Wire from a ``{'from': a, 'to': b}`` (or source/target) record."""
    source = record.get('from', record.get('source'))
    target = record.get('to', record.get('target'))
    if source is None or target is None:
        raise ValueError(f"Wire record needs both endpoints, got {record!r}")
    return Wire(source, target, id=record.get('id'))


def as_component(item):
    """Accept either a Component or a dict record."""
    if isinstance(item, Component):
        return item
    if isinstance(item, dict):
        return component_from_dict(item)
    raise TypeError(f"Expected a Component or dict record, got {type(item)}")


def as_wire(item):
    if isinstance(item, Wire):
        return item
    if isinstance(item, dict):
        return wire_from_dict(item)
    if isinstance(item, (tuple, list)) and len(item) == 2:
        return Wire(item[0], item[1])
    raise TypeError(f"Expected a Wire, dict record or (from, to) pair, got {type(item)}")


def reset_circuit(components):
    """
    Return new components restored to their initial electrical state.

    Batteries come back full, capacitors empty, and resistors, LEDs and bulbs
    zeroed. The input components are not modified.
    """
    fresh = []
    for component in components:
        # dict records are converted into new objects; Components must be copied
        duplicate = as_component(component)
        if duplicate is component:
            duplicate = component.copy()
        duplicate.reset()
        fresh.append(duplicate)
    return fresh
