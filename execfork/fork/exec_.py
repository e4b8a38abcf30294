from dataclasses import dataclass

from ._base import ExecForkBase


@dataclass(kw_only=True, eq=False)
class ExecFork(ExecForkBase):
    executable: str

    def get_process_args(self) -> list[str]:
        return [self.executable, *map(str, self.args)]
