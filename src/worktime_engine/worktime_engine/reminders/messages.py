"""Default English notification texts (localization happens outside the engine)."""

MORNING_TITLE = "Good morning"
MORNING_BODY = "Don't forget to check in when you start working."

EVENING_TITLE = "Still checked in?"
EVENING_BODY = "Remember to check out when you finish work."

PAUSE_TITLE = "Time for a break"
PAUSE_BODY = "You have been working for {hours:g} hours. Take a break."

OVERTIME_TITLE = "Overtime warning"
OVERTIME_BODY = "You have reached the maximum of {hours:g} working hours today."

WEEKLY_TITLE = "Weekly summary (week {week})"
WEEKLY_BODY = "Worked {worked:.1f}h of {target:.1f}h, balance {balance}."


def format_balance_hours(minutes: int) -> str:
    hours = minutes / 60
    if minutes > 0:
        return f"+{hours:.1f}h"
    if minutes < 0:
        return f"{hours:.1f}h"
    return "0.0h"
