"""Value conversion between raw register bytes and physical units."""

from vallox_gateway.protocol.constants import (
    FAN_SPEED_MAX,
    FAN_SPEED_MIN,
    FAN_SPEEDS,
    FLAG_REGISTERS,
    RH_DIVIDER,
    RH_OFFSET,
    TIME_DIVIDER,
    UNKNOWN_SPEED,
    FaultCode,
    Register,
)

# Raw byte -> degrees Celsius, from the controller's NTC sensor curve.
# fmt: off
TEMPERATURE_TABLE: tuple[int, ...] = (
    -74, -70, -66, -62, -59, -56, -54, -52, -50, -48, -47, -46, -44, -43, -42, -41, -40, -39,
    -38, -37, -36, -35, -34, -33, -33, -32, -31, -30, -30, -29, -28, -28, -27, -27, -26, -25,
    -25, -24, -24, -23, -23, -22, -22, -21, -21, -20, -20, -19, -19, -19, -18, -18, -17, -17,
    -16, -16, -16, -15, -15, -14, -14, -14, -13, -13, -12, -12, -12, -11, -11, -11, -10, -10,
    -9, -9, -9, -8, -8, -8, -7, -7, -7, -6, -6, -6, -5, -5, -5, -4, -4, -4, -3, -3, -3, -2, -2,
    -2, -1, -1, -1, -1, 0, 0, 0, 1, 1, 1, 2, 2, 2, 3, 3, 3, 4, 4, 4, 5, 5, 5, 5, 6, 6, 6, 7, 7,
    7, 8, 8, 8, 9, 9, 9, 10, 10, 10, 11, 11, 11, 12, 12, 12, 13, 13, 13, 14, 14, 14, 15, 15,
    15, 16, 16, 16, 17, 17, 18, 18, 18, 19, 19, 19, 20, 20, 21, 21, 21, 22, 22, 22, 23, 23, 24,
    24, 24, 25, 25, 26, 26, 27, 27, 27, 28, 28, 29, 29, 30, 30, 31, 31, 32, 32, 33, 33, 34, 34,
    35, 35, 36, 36, 37, 37, 38, 38, 39, 40, 40, 41, 41, 42, 43, 43, 44, 45, 45, 46, 47, 48, 48,
    49, 50, 51, 52, 53, 53, 54, 55, 56, 57, 59, 60, 61, 62, 63, 65, 66, 68, 69, 71, 73, 75, 77,
    79, 81, 82, 86, 90, 93, 97, 100, 100, 100, 100, 100, 100, 100, 100, 100
)
# fmt: on

SPEED_REGISTERS = frozenset(
    {
        Register.CURRENT_FAN_SPEED,
        Register.MAX_FAN_SPEED,
        Register.DEFAULT_FAN_SPEED,
    }
)

RH_REGISTERS = frozenset(
    {
        Register.MAX_RH,
        Register.RH1,
        Register.RH2,
        Register.BASIC_HUMIDITY,
    }
)

TEMPERATURE_REGISTERS = frozenset(
    {
        Register.OUTDOOR_TEMP,
        Register.EXHAUST_OUT_TEMP,
        Register.EXHAUST_IN_TEMP,
        Register.SUPPLY_TEMP,
        Register.POST_HEATING_TARGET,
        Register.POST_HEATING_SETPOINT,
        Register.PREHEATING_TEMP,
        Register.BYPASS_TEMP,
    }
)

PERCENTAGE_REGISTERS = frozenset(
    {
        Register.POST_HEATING_ON_TIME,
        Register.POST_HEATING_OFF_TIME,
    }
)


def value_to_speed(value: int) -> int:
    """Convert a raw fan speed bit pattern to a speed level 1-8, or -1 if unknown."""
    try:
        return FAN_SPEEDS.index(value) + 1
    except ValueError:
        return UNKNOWN_SPEED


def speed_to_value(speed: int) -> int:
    """
    Convert a speed level to its raw bit pattern.

    Raises:
        ValueError: If speed is outside 1-8
    """
    if not FAN_SPEED_MIN <= speed <= FAN_SPEED_MAX:
        raise ValueError(f"Fan speed must be {FAN_SPEED_MIN}-{FAN_SPEED_MAX}, got {speed}")
    return FAN_SPEEDS[speed - 1]


def value_to_rh(value: int) -> float:
    """Relative humidity in percent, rounded to two decimals."""
    return round((value + RH_OFFSET) / RH_DIVIDER, 2)


def value_to_temp(value: int) -> int:
    """Temperature in degrees Celsius."""
    return TEMPERATURE_TABLE[value]


def value_to_percentage(value: int) -> float:
    """Heating duty cycle in percent."""
    return value / TIME_DIVIDER


def value_type(register: int) -> str:
    """Name of the conversion applied to a register: speed, rh, temperature, percentage or raw."""
    if register in SPEED_REGISTERS:
        return "speed"
    if register in RH_REGISTERS:
        return "rh"
    if register in TEMPERATURE_REGISTERS:
        return "temperature"
    if register in PERCENTAGE_REGISTERS:
        return "percentage"
    return "raw"


_DECODERS = {
    "speed": value_to_speed,
    "rh": value_to_rh,
    "temperature": value_to_temp,
    "percentage": value_to_percentage,
    "raw": int,
}


def decode_value(register: int, value: int) -> int | float:
    """
    Decode a raw register byte to its physical value.

    Unknown registers pass the raw byte through unchanged.

    Example:
        >>> decode_value(Register.OUTDOOR_TEMP, 0)
        -74
        >>> decode_value(Register.RH1, 255)
        150.0
    """
    if not 0 <= value <= 0xFF:
        raise ValueError(f"Raw value must fit in one byte, got {value}")
    return _DECODERS[value_type(register)](value)


def decode_flags(register: int, value: int) -> list[str]:
    """
    Names of the flags set in a bit-field register.

    A multi-bit flag is reported only when all of its bits are set.
    Returns an empty list for registers that are not bit fields.
    """
    flag_cls = FLAG_REGISTERS.get(register)
    if flag_cls is None:
        return []
    return [name.lower() for name, flag in flag_cls.__members__.items() if value & flag == flag]


def decode_fault(register: int, value: int) -> str | None:
    """Name of the active fault for the fault code register, None otherwise."""
    if register != Register.FAULT_CODE:
        return None
    try:
        return FaultCode(value).name.lower()
    except ValueError:
        return None
