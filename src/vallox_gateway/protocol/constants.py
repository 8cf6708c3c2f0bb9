"""Protocol constants for the Vallox RS-485 bus."""

from enum import IntEnum, IntFlag

# ============================================================================
# Frame Structure
# ============================================================================

FRAME_LEN = 6  # SYSTEM(1) + SRC(1) + DST(1) + REGISTER(1) + VALUE(1) + CHECKSUM(1)

# ============================================================================
# Addresses
# ============================================================================

MSG_DOMAIN = 0x01
MSG_POLL_BYTE = 0x00  # register byte of a query, the value byte names the register
MSG_MAINBOARD_1 = 0x11
MSG_MAINBOARDS = 0x10
MSG_PANEL_1 = 0x21
MSG_PANELS = 0x20

PANEL_ADDRESS_MIN = 0x20
PANEL_ADDRESS_MAX = 0x2F
DEFAULT_CLIENT_ADDRESS = 0x27

# ============================================================================
# Timing and queues
# ============================================================================

MIN_FRAME_GAP = 0.05  # seconds between our send and any other bus activity
EVENT_QUEUE_SIZE = 100
COMMAND_QUEUE_SIZE = 100  # must hold the whole init burst
READ_CHUNK_SIZE = 6

BAUDRATE = 9600

# ============================================================================
# Registers
# ============================================================================


class Register(IntEnum):
    """Controller registers, in the order they are queried at startup."""

    IO07 = 0x07
    IO08 = 0x08
    CURRENT_FAN_SPEED = 0x29
    MAX_RH = 0x2A
    CURRENT_CO2 = 0x2B
    MAXIMUM_CO2 = 0x2C
    CO2_STATUS = 0x2D
    MESSAGE = 0x2E
    RH1 = 0x2F
    RH2 = 0x30
    OUTDOOR_TEMP = 0x32
    EXHAUST_OUT_TEMP = 0x33
    EXHAUST_IN_TEMP = 0x34
    SUPPLY_TEMP = 0x35
    FAULT_CODE = 0x36
    POST_HEATING_ON_TIME = 0x55
    POST_HEATING_OFF_TIME = 0x56
    POST_HEATING_TARGET = 0x57
    FLAGS_02 = 0x6D
    FLAGS_04 = 0x6F
    FLAGS_05 = 0x70
    FLAGS_06 = 0x71
    FIREPLACE_COUNTER = 0x79
    REGISTER_8F = 0x8F
    REGISTER_91 = 0x91
    STATUS = 0xA3
    POST_HEATING_SETPOINT = 0xA4
    MAX_FAN_SPEED = 0xA5
    SERVICE_INTERVAL = 0xA6
    PREHEATING_TEMP = 0xA7
    SUPPLY_FAN_STOP_TEMP = 0xA8
    DEFAULT_FAN_SPEED = 0xA9
    PROGRAM = 0xAA
    SERVICE_COUNTER = 0xAB
    BASIC_HUMIDITY = 0xAE
    BYPASS_TEMP = 0xAF
    SUPPLY_FAN_SETPOINT = 0xB0
    EXHAUST_FAN_SETPOINT = 0xB1
    ANTI_FREEZE_HYSTERESIS = 0xB2
    CO2_SETPOINT_UPPER = 0xB3
    CO2_SETPOINT_LOWER = 0xB4
    PROGRAM2 = 0xB5


# Undocumented registers are never polled
INIT_REGISTERS: tuple[Register, ...] = tuple(
    r for r in Register if r not in (Register.REGISTER_8F, Register.REGISTER_91)
)

# Registers that may ever be written, provided writing is enabled
WRITE_ALLOWED: frozenset[int] = frozenset(
    {
        Register.CURRENT_FAN_SPEED,
        Register.MAX_FAN_SPEED,
        Register.DEFAULT_FAN_SPEED,
        Register.PROGRAM,
    }
)

# ============================================================================
# Value conversion
# ============================================================================

FAN_SPEEDS: tuple[int, ...] = (0x01, 0x03, 0x07, 0x0F, 0x1F, 0x3F, 0x7F, 0xFF)
FAN_SPEED_MIN = 1
FAN_SPEED_MAX = len(FAN_SPEEDS)
UNKNOWN_SPEED = -1

RH_OFFSET = 51
RH_DIVIDER = 2.04
TIME_DIVIDER = 2.5

# ============================================================================
# Flags
# ============================================================================


class IO07Flag(IntFlag):
    """Flags of register 0x07."""

    REHEATING = 0x20


class IO08Flag(IntFlag):
    """Flags of register 0x08."""

    SUMMER_MODE = 0x02
    ERROR_RELAY = 0x04
    MOTOR_IN = 0x08
    PREHEATING = 0x10
    MOTOR_OUT = 0x20
    FIREPLACE_SWITCH = 0x40


class CO2StatusFlag(IntFlag):
    """Installed CO2 sensors, register 0x2D."""

    SENSOR_1 = 0x02
    SENSOR_2 = 0x04
    SENSOR_3 = 0x08
    SENSOR_4 = 0x10
    SENSOR_5 = 0x20


class FaultCode(IntEnum):
    """Values of register 0x36."""

    SUPPLY_AIR_SENSOR_FAULT = 0x05
    CARBON_DIOXIDE_ALARM = 0x06
    OUTDOOR_SENSOR_FAULT = 0x07
    EXHAUST_AIR_IN_SENSOR_FAULT = 0x08
    WATER_COIL_FREEZING = 0x09
    EXHAUST_AIR_OUT_SENSOR_FAULT = 0x0A


class Flags2(IntFlag):
    CO2_HIGHER_SPEED_REQ = 0x01
    CO2_LOWER_SPEED_REQ = 0x02
    RH_LOWER_SPEED_REQ = 0x04
    SWITCH_LOWER_SPEED_REQ = 0x08
    CO2_ALARM = 0x40
    CELL_FREEZE_ALARM = 0x80


class Flags4(IntFlag):
    WATER_COIL_FREEZING = 0x10
    MASTER = 0xF0


class Flags5(IntFlag):
    PREHEATING_STATUS = 0xF0


class Flags6(IntFlag):
    REMOTE_CONTROL = 0x10
    ACTIVATE_FIREPLACE_SWITCH = 0x20
    FIREPLACE_FUNCTION = 0x40


class StatusFlag(IntFlag):
    """Flags of register 0xA3."""

    POWER = 0x01
    CO2 = 0x02
    RH = 0x04
    HEATING_MODE = 0x08
    FILTER = 0x10
    HEATING = 0x20
    FAULT = 0x40
    SERVICE = 0x80


class ProgramFlag(IntFlag):
    AUTOMATIC_HUMIDITY = 0x10
    BOOST_SWITCH = 0x20
    WATER = 0x40
    CASCADE_CONTROL = 0x80


class Program2Flag(IntFlag):
    MAXIMUM_SPEED_LIMIT = 0x01


FLAG_REGISTERS: dict[int, type[IntFlag]] = {
    Register.IO07: IO07Flag,
    Register.IO08: IO08Flag,
    Register.CO2_STATUS: CO2StatusFlag,
    Register.FLAGS_02: Flags2,
    Register.FLAGS_04: Flags4,
    Register.FLAGS_05: Flags5,
    Register.FLAGS_06: Flags6,
    Register.STATUS: StatusFlag,
    Register.PROGRAM: ProgramFlag,
    Register.PROGRAM2: Program2Flag,
}
