"""
The fleet of vehicles: resolves vehicle ids to DCC addresses, and device names to function
indices, before commanding the controller.

A vehicle id is a short name, typically a railroad mark followed by a number. An id starting with
a digit is a raw DCC address: commands for it go to the controller without any lookup.
"""
import logging
from collections import OrderedDict

from housedcc.protocol import dcc
from housedcc.protocol.dcc import DccEncodingError

logger = logging.getLogger(__name__)

# the most devices a model declares
MAX_FUNCTIONS = 16


class VehicleType:
    engine = 'engine'
    car = 'car'
    dummy = 'dummy'

    aliases = {'engine': engine, 'locomotive': engine, 'car': car, 'dummy': dummy}

    @classmethod
    def from_name(cls, name):
        """ an unknown type is a vehicle without decoder. """
        return cls.aliases.get(name, cls.dummy)


class Model:
    """ A vehicle model: its type and the function index of each device. """

    def __init__(self, name, type, functions=()):
        self.name = name
        self.type = VehicleType.from_name(type)
        self.functions = OrderedDict()
        for function in list(functions)[:MAX_FUNCTIONS]:
            device, _, index = function.partition(':')
            self.functions[device.strip()] = int(index) if index.strip() else -1

    def export(self):
        return {'name': self.name, 'type': self.type,
                'devices': [{'name': n, 'index': i} for n, i in self.functions.items()]}


class Vehicle:

    def __init__(self, id, address, model=None):
        self.id = id
        self.address = address
        self.model = model
        self.speed = 0
        self.functions = 0

    def device_on(self, index):
        return index > 0 and bool(self.functions & (1 << (index - 1)))


def is_address(id):
    return id[:1].isdigit()


def to_number(value, what):
    """ the integer value, None when it is not a number. """
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("invalid %s %r", what, value)
        return None


class Fleet:
    """
    The models and vehicles known, and the last speed and device state of each vehicle.

    :param controller: the PiDccController receiving the commands.
    """

    def __init__(self, controller):
        self.controller = controller
        self.models = OrderedDict()
        self.vehicles = OrderedDict()

    def declare(self, model, type, functions=()):
        """
        Declares or replaces a vehicle model.
        :param functions: the model's devices, each as "name:index".
        """
        try:
            self.models[model] = Model(model, type, functions)
        except ValueError as e:
            logger.warning("model %s not declared: %s", model, e)
            return False
        logger.info("MODEL %s CREATED, TYPE %s", model, type)
        return True

    def add(self, id, model, address):
        """
        Declares or replaces a vehicle. A vehicle cannot share the address of another vehicle.
        An unknown model leaves the vehicle without devices.
        """
        address = to_number(address, "address")
        if address is None:
            return False
        try:
            dcc.check_locomotive(address)
        except DccEncodingError as e:
            logger.warning("vehicle %s not added: %s", id, e)
            return False
        for other in self.vehicles.values():
            if other.address == address and other.id != id:
                logger.warning("address of %s conflicts with vehicle %s", id, other.id)
                return False
        if model and model not in self.models:
            logger.debug("unknown model %s referenced by vehicle %s", model, id)
        self.vehicles[id] = Vehicle(id, address, self.models.get(model))
        logger.info("VEHICLE %s CREATED, MODEL %s", id, model)
        return True

    def delete(self, id):
        """ removes a vehicle or, if there is no such vehicle, a model. """
        if self.vehicles.pop(id, None) is not None:
            logger.info("VEHICLE %s DELETED", id)
            return True
        model = self.models.pop(id, None)
        if model is None:
            return False
        for vehicle in self.vehicles.values():
            if vehicle.model is model:
                vehicle.model = None
        logger.info("MODEL %s DELETED", id)
        return True

    def exists(self, id):
        return id in self.vehicles

    def move(self, id, speed):
        speed = dcc.clamp_speed(speed)
        if is_address(id):
            address = to_number(id, "address")
            return address is not None and self.controller.move(address, speed)
        vehicle = self.vehicles.get(id)
        if vehicle is None:
            return False
        if speed != vehicle.speed:
            if speed < 0:
                logger.info("VEHICLE %s REVERSE AT SPEED %d", id, -speed)
            elif speed > 0:
                logger.info("VEHICLE %s FORWARD AT SPEED %d", id, speed)
            else:
                logger.info("VEHICLE %s STOP", id)
        vehicle.speed = speed
        return self.controller.move(vehicle.address, speed)

    def stop(self, id=None, emergency=False):
        """ stops one vehicle, or all vehicles when no id is given. """
        if id is None:
            if not self.controller.stop(dcc.ALL_LOCOMOTIVES, emergency):
                return False
            self.stopped()
            return True
        if is_address(id):
            address = to_number(id, "address")
            return address is not None and self.controller.stop(address, emergency)
        vehicle = self.vehicles.get(id)
        if vehicle is None:
            return False
        logger.info("VEHICLE %s STOP, %s", id, "EMERGENCY BREAK" if emergency else "BREAK")
        vehicle.speed = 0
        return self.controller.stop(vehicle.address, emergency)

    def stopped(self):
        """ records that all vehicles were stopped. """
        logger.info("VEHICLE ALL STOPPED")
        for vehicle in self.vehicles.values():
            vehicle.speed = 0

    def set(self, id, name, on):
        """
        Turns a device of a vehicle on or off. For a raw address, `on` is the function group
        instruction itself and `name` is ignored.
        """
        if is_address(id):
            address = to_number(id, "address")
            instruction = to_number(on, "instruction")
            if address is None or instruction is None:
                return False
            return self.controller.set_function(address, instruction)
        vehicle = self.vehicles.get(id)
        if vehicle is None or vehicle.model is None:
            return False
        index = vehicle.model.functions.get(name)
        if index is None:
            logger.debug("vehicle %s has no device %s", id, name)
            return False
        try:
            mask = dcc.function_mask(vehicle.functions, index, on)
            instruction = dcc.function_instruction(index, mask)
        except ValueError as e:
            logger.warning("vehicle %s device %s: %s", id, name, e)
            return False
        logger.info("VEHICLE %s SET %s TO %s", id, name, "ON" if on else "OFF")
        vehicle.functions = mask
        return self.controller.set_function(vehicle.address, instruction)

    def status(self):
        vehicles = []
        for vehicle in self.vehicles.values():
            item = {'id': vehicle.id, 'address': vehicle.address, 'speed': vehicle.speed}
            model = vehicle.model
            if model is not None:
                item['model'] = model.name
                item['type'] = model.type
                if model.functions:
                    item['devices'] = {name: 1 if vehicle.device_on(index) else 0
                                       for name, index in model.functions.items()}
            vehicles.append(item)
        return {'vehicles': vehicles}

    def export(self):
        """ the models and vehicles, in the layout reload() accepts once converted to configuration. """
        vehicles = []
        for vehicle in self.vehicles.values():
            item = {'id': vehicle.id, 'address': vehicle.address}
            if vehicle.model is not None:
                item['model'] = vehicle.model.name
            vehicles.append(item)
        return {'models': [m.export() for m in self.models.values()], 'vehicles': vehicles}

    def reload(self, section):
        """
        Rebuilds the fleet from a configuration section with `models` and `vehicles` subsections,
        each keyed by the model name or vehicle id. A missing subsection leaves that table as is.
        """
        models = section.get('models')
        if models is not None:
            self.models.clear()
            for name, conf in models.items():
                devices = conf.get('devices', [])
                if isinstance(devices, str):
                    devices = [devices]
                self.declare(name, conf.get('type', VehicleType.dummy), devices)
        vehicles = section.get('vehicles')
        if vehicles is not None:
            self.vehicles.clear()
            for id, conf in vehicles.items():
                self.add(id, conf.get('model') or None, conf.get('address', 0))
        else:
            # rebind the vehicles to the reloaded models
            for vehicle in self.vehicles.values():
                if vehicle.model is not None:
                    vehicle.model = self.models.get(vehicle.model.name)
