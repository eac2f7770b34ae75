from .sinks import (
    CollectingResultSink,
    JsonlResultSink,
    ResultSink,
    StdoutResultSink,
    build_result_sink,
    result_to_dict,
)

__all__ = [
    "CollectingResultSink",
    "JsonlResultSink",
    "ResultSink",
    "StdoutResultSink",
    "build_result_sink",
    "result_to_dict",
]
