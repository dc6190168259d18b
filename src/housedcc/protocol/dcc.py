"""
Encodes locomotive and accessory commands as the DCC instruction bytes understood by the
PiDCC command generator, and renders them as the text lines the generator reads on its
standard input.

Only short (7-bit) locomotive addresses and 9-bit accessory addresses are supported.
"""

ALL_LOCOMOTIVES = 0
MAX_LOCOMOTIVE_ADDRESS = 127
MAX_ACCESSORY_ADDRESS = 511
MAX_SPEED = 28

# index of the headlight (FL) in the function mask, bit 0x1000
HEADLIGHT = 13

# 28 speed step encoding: the speed step is the index, the value holds the
# intermediate bit C in bit 4 and the speed bits SSSS in bits 0-3.
SPEED_STEPS = (0,    0x2,  0x12, 0x3,  0x13,    # 0  1  2  3  4
               0x4,  0x14, 0x5,  0x15, 0x6,     # 5  6  7  8  9
               0x16, 0x7,  0x17, 0x8,  0x18,    # 10 11 12 13 14
               0x9,  0x19, 0xa,  0x1a, 0xb,     # 15 16 17 18 19
               0x1b, 0xc,  0x1c, 0xd,  0x1d,    # 20 21 22 23 24
               0xe,  0x1e, 0xf,  0x1f)          # 25 26 27 28

SPEED_INSTRUCTION = 0x40
FORWARD = 0x20
FUNCTION_GROUP_ONE = 0x80       # CCC=100: FL, F1 to F4
FUNCTION_GROUP_TWO = 0xb0       # CCC=101, S=1: F5 to F8
FUNCTION_GROUP_THREE = 0xa0     # CCC=101, S=0: F9 to F12
ACCESSORY = 0x80


class DccEncodingError(ValueError):
    """ A command cannot be encoded, typically because an address or index is out of range. """


def check_locomotive(address):
    if not 0 < address <= MAX_LOCOMOTIVE_ADDRESS:
        raise DccEncodingError("invalid locomotive address %s" % address)
    return address


def check_stop_address(address):
    """ like check_locomotive(), but address 0 designates all locomotives. """
    if not ALL_LOCOMOTIVES <= address <= MAX_LOCOMOTIVE_ADDRESS:
        raise DccEncodingError("invalid stop address %s" % address)
    return address


def check_accessory(address):
    if not 0 <= address <= MAX_ACCESSORY_ADDRESS:
        raise DccEncodingError("invalid accessory address %s" % address)
    return address


def clamp_speed(speed):
    """
    >>> clamp_speed(40)
    28
    >>> clamp_speed(-0.5)
    0
    """
    return max(-MAX_SPEED, min(MAX_SPEED, int(speed)))


def speed_instruction(speed):
    """
    Encodes a signed speed step, positive meaning forward.

    >>> speed_instruction(15)
    105
    >>> speed_instruction(-1)
    66
    """
    speed = clamp_speed(speed)
    direction = FORWARD if speed > 0 else 0
    return SPEED_INSTRUCTION + direction + (SPEED_STEPS[abs(speed)] & 0x1f)


def stop_instruction(emergency=False):
    """ an emergency stop cuts power immediately instead of following the deceleration curve. """
    return SPEED_INSTRUCTION + (1 if emergency else 0)


def function_mask(mask, index, on):
    """
    Sets or clears the bit of a function index (1 based) in a function mask.

    >>> hex(function_mask(0, 13, True))
    '0x1000'
    """
    bit = 1 << (index - 1)
    return (mask | bit) if on else (mask & ~bit)


def function_instruction(index, mask):
    """
    Selects the function group that carries the given function index and encodes the state
    of all the functions in that group from the mask.

    >>> hex(function_instruction(13, 0x1001))
    '0x91'
    >>> hex(function_instruction(6, 0x20))
    '0xb2'
    """
    if 1 <= index <= 4 or index == HEADLIGHT:
        return FUNCTION_GROUP_ONE + (mask & 0xf) + (0x10 if mask & 0x1000 else 0)
    if 5 <= index <= 8:
        return FUNCTION_GROUP_TWO + ((mask >> 4) & 0xf)
    if 9 <= index <= 12:
        return FUNCTION_GROUP_THREE + ((mask >> 8) & 0xf)
    raise DccEncodingError("invalid function index %s" % index)


def accessory_instructions(address, device, value):
    """
    Splits a 9-bit accessory address into the 6 low bits carried by the first byte and the 3 high
    bits carried by the second byte, along with the output state and the device.

    >>> accessory_instructions(65, 2, True)
    (129, 154)
    """
    check_accessory(address)
    low = ACCESSORY + (address & 0x3f)
    high = ACCESSORY + ((address & 0x1c0) >> 2) + (0x08 if value else 0) + (device & 0x0f)
    return low, high


def send_line(address, instruction):
    """
    >>> send_line(5, 105)
    'send 5 105'
    """
    return "send %d %d" % (address, instruction)


def pin_line(pin_a, pin_b):
    return "pin %d %d" % (pin_a, pin_b)
