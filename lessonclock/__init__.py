"""Personal school timetable, bell scheme and homework tracker."""

__version__ = "0.3.0"
