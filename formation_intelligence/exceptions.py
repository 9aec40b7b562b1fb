"""
Exception hierarchy for the Formation Intelligence engine.

Analysis entry points never raise for validated input; these errors cover
the predictor's training data and caller mistakes such as an unknown
assignment strategy name.
"""


class FormationIntelligenceError(Exception):
    """Base error for the engine."""


class TrainingDataError(FormationIntelligenceError):
    """Training set is missing, malformed or does not match the network shape."""


class PredictorInputError(FormationIntelligenceError):
    """Input vector length does not match the predictor's input layer."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Predictor expects {expected} inputs, received {received}"
        )


class UnknownStrategyError(FormationIntelligenceError):
    """Requested assignment strategy is not registered."""

    def __init__(self, name: str, available):
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"Unknown assignment strategy '{name}'. Available: {', '.join(self.available)}"
        )
