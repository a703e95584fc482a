from .alarm_job import default_output_path, run_alarm_job

__all__ = ["default_output_path", "run_alarm_job"]
