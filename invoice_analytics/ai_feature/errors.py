class AnalysisError(Exception):
    """Base class for failures that stop the analytics pipeline early."""


class EmptyQuestion(AnalysisError):
    def __init__(self, message: str = "Invalid question: Question must be a non-empty string"):
        super().__init__(message)


class SynthesisFailed(AnalysisError):
    pass


class DatabaseError(AnalysisError):
    pass


class InvalidQuery(DatabaseError):
    def __init__(self, message: str = "Invalid query: Query must be a non-empty string"):
        super().__init__(message)


# Internal to the chart loop / classifier; never reach the caller
class ShapeValidationFailed(Exception):
    pass


class ClassificationAmbiguous(Exception):
    pass
