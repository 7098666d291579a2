from datetime import datetime, timedelta

DAY = datetime(2026, 11, 1)


def at(hhmm: str, day: datetime = DAY) -> datetime:
    hours, minutes = (int(p) for p in hhmm.split(":"))
    return day + timedelta(hours=hours, minutes=minutes)
