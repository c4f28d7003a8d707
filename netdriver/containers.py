"""Dependency injection container for the netdriver application.

This module defines the Container class which manages all application
dependencies using dependency-injector. It provides centralized access
to services through the container instance.
"""

from dependency_injector import containers, providers

from netdriver.config.logging import LoggingObserver
from netdriver.core.data import DataLoader
from netdriver.core.evaluation import ConfusionEvaluator
from netdriver.core.execution import FailurePolicy, TaskExecutor
from netdriver.core.modeling import DeepBeliefNetwork
from netdriver.settings import NetdriverSettings


class Container(containers.DeclarativeContainer):
    """Main dependency injection container for the netdriver application.

    Services are accessed via the container singleton instance.
    """

    # Root settings - loaded from environment/.env
    settings = providers.Singleton(NetdriverSettings)

    # --- Execution ---

    data_loader = providers.Factory(
        DataLoader,
        binarize_threshold=settings.provided.data.binarize_threshold,
    )

    evaluator = providers.Factory(ConfusionEvaluator)

    failure_policy = providers.Factory(
        FailurePolicy,
        abort_on_unknown_action=settings.provided.execution.abort_on_unknown_action,
        abort_on_model_io_failure=settings.provided.execution.abort_on_model_io_failure,
    )

    logging_observer = providers.Singleton(LoggingObserver)

    task_executor = providers.Factory(
        TaskExecutor,
        loader=data_loader,
        evaluator=evaluator,
        policy=failure_policy,
        observers=providers.List(logging_observer),
    )

    # --- Reference network ---

    # input_size and n_classes are supplied by the caller.
    network_factory = providers.Factory(
        DeepBeliefNetwork,
        hidden_layers=settings.provided.network.hidden_layers,
        dense_layers=settings.provided.network.dense_layers,
        learning_rate=settings.provided.network.learning_rate,
        momentum=settings.provided.network.momentum,
        batch_size=settings.provided.network.batch_size,
        error_goal=settings.provided.network.error_goal,
        patience=settings.provided.network.patience,
        random_state=settings.provided.network.random_state,
    )


def create_container() -> Container:
    """Create and initialize the DI container.

    Returns:
        Initialized Container instance.
    """
    container = Container()
    return container


# Global container instance
container = create_container()
