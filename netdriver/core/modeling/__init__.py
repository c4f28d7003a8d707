"""Reference network implementing the model contract on scikit-learn."""

from netdriver.core.modeling.networks import DeepBeliefNetwork
from netdriver.core.modeling.trainers import SgdTrainer

__all__ = ["DeepBeliefNetwork", "SgdTrainer"]
