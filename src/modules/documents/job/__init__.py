from .orphan_sweep import run_orphan_sweep, start_orphan_sweep_job

__all__ = ['run_orphan_sweep', 'start_orphan_sweep_job']
