"""Human-readable alert texts (Telegram HTML)."""

from radar_core.lifecycle import Transition
from radar_core.models import Direction, Signal, SignalStatus, format_price

_STATUS_HEADLINES = {
    SignalStatus.TARGET1_HIT: "🎯 <b>Target 1 reached!</b>",
    SignalStatus.TARGET2_HIT: "🎯🎯 <b>Target 2 reached!</b>",
    SignalStatus.TARGET3_HIT: "🎯🎯🎯 <b>Target 3 reached!</b>",
    SignalStatus.STOP_HIT: "🛑 <b>Stop loss hit</b>",
}


def format_new_signal(signal: Signal) -> str:
    side = "Buy 🟢" if signal.direction == Direction.BUY else "Sell 🔴"
    return (
        f"🚀 <b>New signal from {signal.strategy_name}</b>\n\n"
        f"Pair: #{signal.pair.base}_{signal.pair.quote}\n"
        f"Side: {side}\n"
        f"Entry: {signal.entry_price}\n\n"
        f"Targets:\n"
        f"🎯 T1: {signal.target1}\n"
        f"🎯 T2: {signal.target2}\n"
        f"🎯 T3: {signal.target3}\n\n"
        f"🛑 Stop loss: {signal.stop_loss}\n\n"
        f"📈 Strategy success rate: {signal.success_rate}\n"
        f"📊 Analysis: {signal.rationale}"
    )


def format_transition(transition: Transition) -> str:
    signal = transition.signal
    return (
        f"{_STATUS_HEADLINES[transition.current]}\n"
        f"Pair: #{signal.pair.base}_{signal.pair.quote}\n"
        f"Current price: {format_price(transition.price)}\n"
        f"Strategy: {signal.strategy_name}"
    )
