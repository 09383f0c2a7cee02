from .child_process import ChildProcess, SubprocessSpawner

__all__ = ["ChildProcess", "SubprocessSpawner"]
