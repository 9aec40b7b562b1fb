"""Trainable prediction package."""
from .predictor import FormationPredictor, TrainingSet, formation_features
