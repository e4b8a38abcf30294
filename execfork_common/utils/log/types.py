from typing import Literal, NotRequired, TypeAlias, TypedDict

LogLevels: TypeAlias = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class LogData(TypedDict):
    application: str
    level: LogLevels
    timestamp: int
    threadId: int
    message: str
    identifier: NotRequired[str]
