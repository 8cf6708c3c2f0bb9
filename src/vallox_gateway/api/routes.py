"""API route handlers."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from vallox_gateway.api.dependencies import get_cache, get_session
from vallox_gateway.core.cache import RegisterCache
from vallox_gateway.core.models import (
    CommandResponse,
    CommandResult,
    ErrorResponse,
    Event,
    FanSpeedRequest,
    RegistersResponse,
    RegisterValue,
)
from vallox_gateway.protocol.codec import decode_fault, decode_flags, value_type
from vallox_gateway.protocol.constants import Register
from vallox_gateway.protocol.session import BusSession

router = APIRouter(prefix="/api")


def register_name(register: int) -> str:
    try:
        return Register(register).name.lower()
    except ValueError:
        return f"register_{register:02x}"


def lookup_register(name: str) -> Register:
    try:
        return Register[name.upper()]
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown register: {name}") from None


def to_register_value(event: Event) -> RegisterValue:
    return RegisterValue(
        register=event.register_id,
        name=register_name(event.register_id),
        type=value_type(event.register_id),
        raw=event.raw_value,
        value=event.value,
        flags=decode_flags(event.register_id, event.raw_value),
        fault=decode_fault(event.register_id, event.raw_value),
        source=event.source,
        time=event.time,
    )


@router.get("/registers", response_model=RegistersResponse)
async def get_registers(cache: RegisterCache = Depends(get_cache)):
    """Get the latest value of every register seen on the bus."""
    events = await cache.get_all()

    return RegistersResponse(
        timestamp=cache.last_update or datetime.now(),
        registers={register_name(reg): to_register_value(event) for reg, event in sorted(events.items())},
    )


@router.get("/registers/{name}", response_model=RegisterValue, responses={404: {"model": ErrorResponse}})
async def get_register(name: str, cache: RegisterCache = Depends(get_cache)):
    """Get the latest value of one register."""
    register = lookup_register(name)

    event = await cache.get(register)
    if event is None:
        raise HTTPException(status_code=404, detail=f"No value received yet for {name}")

    return to_register_value(event)


@router.post(
    "/registers/{name}/query",
    response_model=CommandResponse,
    status_code=202,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def query_register(name: str, session: BusSession = Depends(get_session)):
    """Ask the controller to report a register; the answer arrives on the bus."""
    register = lookup_register(name)

    if not session.running:
        raise HTTPException(status_code=503, detail="Bus session not running")

    result = await session.query(register)
    return CommandResponse(result=result)


@router.put(
    "/fan-speed",
    response_model=CommandResponse,
    status_code=202,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def set_fan_speed(request: FanSpeedRequest, session: BusSession = Depends(get_session)):
    """Set the current, default or maximum fan speed."""
    if not session.running:
        raise HTTPException(status_code=503, detail="Bus session not running")

    setters = {
        "current": session.set_speed,
        "default": session.set_default_fan_speed,
        "max": session.set_max_fan_speed,
    }
    result = await setters[request.target](request.speed)

    if result is CommandResult.INVALID_SPEED:
        raise HTTPException(status_code=400, detail=f"Invalid fan speed {request.speed}, must be 1-8")
    if result is CommandResult.DENIED:
        raise HTTPException(status_code=403, detail="Writing is disabled")

    return CommandResponse(result=result, detail=f"{request.target} fan speed set to {request.speed}")
