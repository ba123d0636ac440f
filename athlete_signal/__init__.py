"""AthleteSignal: training load and periodization engine for runners."""

__version__ = "0.1.0"
