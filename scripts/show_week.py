from pathlib import Path
import sys
import datetime as dt

# Ensure project root on sys.path for direct script execution
root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from lessonclock.config import load_settings, resolve
from lessonclock.data.gateway import FileGateway
from lessonclock.data.session import ScheduleSession
from lessonclock.render import text


def main() -> None:
    settings = load_settings(root)
    session = ScheduleSession(FileGateway(resolve(root, settings.data_dir)))
    session.load()
    lessons = {l.id: l for l in session.store.all_lessons()}
    for day, grid in session.week():
        if grid:
            print(day.title)
            for line in text.day_lines(grid, lessons, session.time_scheme):
                print(f"  {line}")
    now = dt.datetime.now()
    print("\n".join(text.status_lines(session.status(now), lessons)))
    print("\n".join(text.homework_lines(session.homework_due(now))))


if __name__ == "__main__":
    main()
