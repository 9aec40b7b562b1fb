"""
Formation Predictor

Small feed-forward network (one sigmoid hidden layer, sigmoid outputs)
trained with stochastic gradient descent on mean squared error.

The network is trained once, at construction, on an externally supplied
training set. Weights are frozen afterwards, so a single instance can be
read concurrently. It is an extension hook: no analysis score depends
on its output.

Default feature layout (see ``formation_features``):
    [defensive, attacking, midfield, chemistry, balance, DF/10, MF/10, FW/10]
Default targets:
    [defensive_effectiveness, attacking_effectiveness, overall_rating]
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config import Settings, settings as default_settings
from ..exceptions import PredictorInputError, TrainingDataError
from ..models.schemas import Formation, FormationAnalysis, PositionRole

logger = logging.getLogger(__name__)


def sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-x))


def formation_features(analysis: FormationAnalysis, formation: Formation) -> List[float]:
    """Feature vector for the default 8-input network."""
    counts = {role: 0 for role in PositionRole}
    for slot in formation.slots:
        counts[slot.role] += 1

    return [
        analysis.defensive_strength,
        analysis.attacking_strength,
        analysis.midfield_control,
        analysis.overall_chemistry,
        analysis.balance_score,
        counts[PositionRole.DF] / 10,
        counts[PositionRole.MF] / 10,
        counts[PositionRole.FW] / 10,
    ]


@dataclass
class TrainingSet:
    """Input/target pairs for the predictor."""
    inputs: np.ndarray   # (n_samples, n_inputs)
    targets: np.ndarray  # (n_samples, n_outputs)

    def __post_init__(self):
        self.inputs = np.asarray(self.inputs, dtype=float)
        self.targets = np.asarray(self.targets, dtype=float)

        if self.inputs.ndim != 2 or self.targets.ndim != 2:
            raise TrainingDataError("Inputs and targets must be 2D")
        if len(self.inputs) == 0:
            raise TrainingDataError("Training set is empty")
        if len(self.inputs) != len(self.targets):
            raise TrainingDataError(
                f"{len(self.inputs)} input rows but {len(self.targets)} target rows"
            )
        if np.any(self.targets < 0) or np.any(self.targets > 1):
            raise TrainingDataError("Targets must lie in [0, 1] for sigmoid outputs")

    def __len__(self) -> int:
        return len(self.inputs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TrainingSet":
        """
        Load a JSON training set.

        Expected format:
            {"samples": [{"inputs": [...], "targets": [...]}, ...]}
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise TrainingDataError(f"Training file not found: {path}")
        except json.JSONDecodeError as e:
            raise TrainingDataError(f"Invalid JSON in {path}: {e}")

        try:
            samples = data["samples"]
            inputs = [s["inputs"] for s in samples]
            targets = [s["targets"] for s in samples]
        except (KeyError, TypeError) as e:
            raise TrainingDataError(f"Malformed training file {path}: missing {e}")

        try:
            return cls(inputs=np.array(inputs, dtype=float), targets=np.array(targets, dtype=float))
        except ValueError as e:
            raise TrainingDataError(f"Ragged or non-numeric samples in {path}: {e}")


class FormationPredictor:
    """
    Feed-forward network: input -> sigmoid hidden -> sigmoid output.

    Args:
        input_size / hidden_size / output_size: layer sizes
        training_set: optional external training data; without it the
            network keeps its seeded random weights
        epochs: passes over the training set
        learning_rate: SGD step size
        seed: RNG seed for weight initialisation and sample shuffling
    """

    def __init__(
        self,
        input_size: Optional[int] = None,
        hidden_size: Optional[int] = None,
        output_size: Optional[int] = None,
        training_set: Optional[TrainingSet] = None,
        epochs: Optional[int] = None,
        learning_rate: Optional[float] = None,
        seed: Optional[int] = None,
        config: Optional[Settings] = None
    ):
        config = config or default_settings

        self.input_size = input_size if input_size is not None else config.PREDICTOR_INPUT_SIZE
        self.hidden_size = hidden_size if hidden_size is not None else config.PREDICTOR_HIDDEN_SIZE
        self.output_size = output_size if output_size is not None else config.PREDICTOR_OUTPUT_SIZE
        self.learning_rate = learning_rate if learning_rate is not None else config.PREDICTOR_LEARNING_RATE
        self.epochs = epochs if epochs is not None else config.PREDICTOR_EPOCHS
        seed = seed if seed is not None else config.PREDICTOR_SEED

        rng = np.random.default_rng(seed)
        w1 = rng.uniform(-1, 1, (self.hidden_size, self.input_size))
        b1 = rng.uniform(-1, 1, self.hidden_size)
        w2 = rng.uniform(-1, 1, (self.output_size, self.hidden_size))
        b2 = rng.uniform(-1, 1, self.output_size)

        self.loss_history: List[float] = []
        self.is_trained = False

        if training_set is not None:
            w1, b1, w2, b2 = self._train(training_set, w1, b1, w2, b2, rng)
            self.is_trained = True

        for arr in (w1, b1, w2, b2):
            arr.setflags(write=False)
        self._w1, self._b1, self._w2, self._b2 = w1, b1, w2, b2
        self.loss_history = tuple(self.loss_history)

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "FormationPredictor":
        """Build a predictor, training it on PREDICTOR_TRAINING_FILE when set."""
        config = config or default_settings
        training_set = None
        if config.PREDICTOR_TRAINING_FILE is not None:
            training_set = TrainingSet.from_file(config.PREDICTOR_TRAINING_FILE)
        return cls(training_set=training_set, config=config)

    @property
    def weights(self) -> Tuple[np.ndarray, np.ndarray]:
        return self._w1, self._w2

    @property
    def biases(self) -> Tuple[np.ndarray, np.ndarray]:
        return self._b1, self._b2

    def _forward(self, x, w1, b1, w2, b2):
        hidden = sigmoid(w1 @ x + b1)
        output = sigmoid(w2 @ hidden + b2)
        return hidden, output

    def _train(self, training_set: TrainingSet, w1, b1, w2, b2, rng):
        if training_set.inputs.shape[1] != self.input_size:
            raise TrainingDataError(
                f"Training inputs have {training_set.inputs.shape[1]} features, "
                f"network expects {self.input_size}"
            )
        if training_set.targets.shape[1] != self.output_size:
            raise TrainingDataError(
                f"Training targets have {training_set.targets.shape[1]} values, "
                f"network expects {self.output_size}"
            )

        n_samples = len(training_set)
        for epoch in range(self.epochs):
            epoch_loss = 0.0
            for i in rng.permutation(n_samples):
                x = training_set.inputs[i]
                target = training_set.targets[i]

                hidden, output = self._forward(x, w1, b1, w2, b2)
                error = output - target
                epoch_loss += 0.5 * float(np.sum(error ** 2))

                # Backpropagation through both sigmoid layers
                delta_out = error * output * (1 - output)
                delta_hidden = (w2.T @ delta_out) * hidden * (1 - hidden)

                w2 -= self.learning_rate * np.outer(delta_out, hidden)
                b2 -= self.learning_rate * delta_out
                w1 -= self.learning_rate * np.outer(delta_hidden, x)
                b1 -= self.learning_rate * delta_hidden

            self.loss_history.append(epoch_loss / n_samples)

        if self.loss_history:
            logger.info(
                f"Trained formation predictor on {n_samples} samples for {self.epochs} epochs "
                f"(loss {self.loss_history[0]:.4f} -> {self.loss_history[-1]:.4f})"
            )

        return w1, b1, w2, b2

    def loss(self, training_set: TrainingSet) -> float:
        """Mean squared-error loss of the frozen network on a data set."""
        total = 0.0
        for x, target in zip(training_set.inputs, training_set.targets):
            _, output = self._forward(x, self._w1, self._b1, self._w2, self._b2)
            total += 0.5 * float(np.sum((output - target) ** 2))
        return total / len(training_set)

    def predict(self, inputs: Sequence[float]) -> List[float]:
        """
        Run a forward pass.

        Args:
            inputs: Feature vector of length ``input_size``

        Returns:
            Output activations, each in (0, 1)
        """
        x = np.asarray(inputs, dtype=float)
        if x.shape != (self.input_size,):
            raise PredictorInputError(self.input_size, int(x.size))

        _, output = self._forward(x, self._w1, self._b1, self._w2, self._b2)
        return [float(v) for v in output]
