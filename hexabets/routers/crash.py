import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from hexabets.errors import HexaBetsError, RaceViolation
from hexabets.shared_state import bet_service, crash_scheduler, manager, wallet

crash_router = APIRouter()


async def handle_bet(session_id: str, data: dict) -> dict:
    bet_amount = data.get("bet")
    lock = await bet_service.session_locks.get_lock(session_id)
    async with lock:
        wallet.ensure_funds(session_id, bet_amount)
        await crash_scheduler.place_bet(session_id, bet_amount)
        balance = wallet.apply(session_id, -bet_amount)
    return {"event": "crash:bet:ack", "data": {"bet": bet_amount, "balance": balance}}


async def handle_cashout(session_id: str, data: dict) -> dict:
    """Settle the session's stake at the claimed multiplier.

    The registered stake is paid, never the ``bet`` the client echoes back.
    """
    claimed = float(data.get("at", 0))
    try:
        payout = await crash_scheduler.cashout(data.get("bet"), claimed, participant=session_id)
    except RaceViolation as e:
        return {"event": "crash:cashout:ack", "data": {"payout": 0, "accepted": False, "reason": str(e)}}
    lock = await bet_service.session_locks.get_lock(session_id)
    async with lock:
        balance = wallet.apply(session_id, payout)
    return {"event": "crash:cashout:ack", "data": {"payout": payout, "accepted": True, "balance": balance}}


HANDLERS = {
    "crash:bet": handle_bet,
    "crash:cashout": handle_cashout,
}


@crash_router.websocket("/ws/crash")
async def crash_socket(websocket: WebSocket):
    session_id = websocket.headers.get("x-session-id") or websocket.query_params.get("session") or "guest"
    await websocket.accept()
    queue = crash_scheduler.subscribe()
    sender = asyncio.create_task(manager.pump(queue, websocket))
    try:
        while True:
            message = await websocket.receive_json()
            handler = HANDLERS.get(message.get("event"))
            if handler is None:
                await manager.send_personal_message(
                    {"event": "crash:error", "data": {"detail": "unknown event"}}, queue, websocket
                )
                continue
            try:
                reply = await handler(session_id, message.get("data") or {})
            except (HexaBetsError, TypeError, ValueError) as e:
                reply = {"event": "crash:error", "data": {"detail": str(e)}}
            await manager.send_personal_message(reply, queue, websocket)
    except WebSocketDisconnect:
        logging.info(f"Crash subscriber {session_id} disconnected")
    finally:
        manager.unsubscribe(queue)
        sender.cancel()
