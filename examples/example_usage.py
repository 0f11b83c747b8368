"""Example: drive the engine through its services (no UI).

Prints this week's and this month's balance plus the live figures of today.
"""

from datetime import date

from worktime_engine.main import create_engine


def main():
    container = create_engine()
    try:
        today = date.today()
        week = container.calculation_service.calculate_week(today)
        month = container.calculation_service.calculate_month(today.year, today.month)
        snapshot = container.tracking_service.get_live_snapshot()

        print(f"Week {week.week_number}: {week.actual_minutes}/{week.target_minutes} min, balance {week.balance_minutes}")
        print(f"Month {month.month}/{month.year}: balance {month.balance_minutes}, cumulative {month.cumulative_balance_minutes}")
        print(f"Status {snapshot.status.value}, worked {snapshot.work_time}, pause {snapshot.pause_time}")
        for view in container.achievement_service.get_all()[:5]:
            print(f"  {view.name}: {view.progress_text}")
    finally:
        container.close()


if __name__ == "__main__":
    main()
