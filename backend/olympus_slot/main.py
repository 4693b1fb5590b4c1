"""Olympus Slot FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from olympus_slot.config import settings
from olympus_slot.middleware import ErrorHandlerMiddleware
from olympus_slot.protocol import (
    CashOutResponse,
    InitResponse,
    ReelStopInfo,
    ResetRequest,
    SpinRequest,
    SpinResponse,
    StateResponse,
    TimelineInfo,
)
from olympus_slot.session_service import session_service
from olympus_slot.validators import validate_spin_request


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the session with the app and stop its timers on shutdown."""
    session_service.start()
    yield
    session_service.close()


app = FastAPI(
    title="Olympus Slot",
    version="0.1.0",
    description="Educational biased slot machine session server",
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(ErrorHandlerMiddleware)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/init")
async def init() -> dict:
    """Static configuration plus the current session snapshot."""
    controller = session_service.controller
    return InitResponse(session=controller.snapshot()).model_dump()


@app.post("/spin")
async def spin(body: SpinRequest) -> dict:
    """
    Request a spin.

    A request the session cannot honour right now (spin in flight, not
    enough credits, session over) is ignored and reported with
    accepted=false rather than as an error.
    """
    validate_spin_request(body)
    controller = session_service.controller

    reason = controller.rejection_reason()
    ticket = controller.request_spin(symbol_height=body.symbolHeight)
    if ticket is None:
        return SpinResponse(
            accepted=False,
            reason=reason.value if reason else None,
            spinCount=controller.state.spin_count,
        ).model_dump()

    return SpinResponse(
        accepted=True,
        spinCount=ticket.spin_count,
        targetSymbols=[symbol.value for symbol in ticket.outcome.target_symbols],
        stops=[
            ReelStopInfo(reel=s.reel, symbol=s.symbol.value, index=s.index, offset=s.offset)
            for s in ticket.stops
        ],
        timeline=[TimelineInfo(name=t.name, at=t.at) for t in ticket.timeline],
    ).model_dump()


@app.get("/state")
async def state() -> dict:
    """Current snapshot plus display events queued since the last poll."""
    controller = session_service.controller
    return StateResponse(
        session=controller.snapshot(),
        events=session_service.drain_events(),
    ).model_dump()


@app.post("/cashout")
async def cashout() -> dict:
    """Freeze the session and return the summary."""
    summary = session_service.controller.request_cash_out()
    if summary is None:
        return CashOutResponse(accepted=False).model_dump()
    return CashOutResponse(
        accepted=True,
        startingCredits=summary.starting_credits,
        finalCredits=summary.final_credits,
        netChange=summary.net_change,
        text=summary.text,
        creditHistory=summary.credit_history,
    ).model_dump()


@app.post("/reset")
async def reset(body: ResetRequest | None = None) -> dict:
    """Discard the session and start a new one."""
    controller = session_service.start(seed=body.seed if body else None)
    return InitResponse(session=controller.snapshot()).model_dump()
