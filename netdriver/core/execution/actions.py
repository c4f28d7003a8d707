from netdriver.lib.choices import Choice, ChoiceEnum


class ActionKind(ChoiceEnum):
    """Actions a task execution can perform."""

    PRETRAIN = Choice("pretrain", "Pretraining")
    TRAIN = Choice("train", "Training")
    TEST = Choice("test", "Testing")
    SAVE = Choice("save", "Save Weights")
    LOAD = Choice("load", "Load Weights")
