"""Base node interface.

Defines the abstract base class for all node executors.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import structlog

from flowexec.core.errors import ExecutionError, NodeExecutionError
from flowexec.models.execution import ExecutionContext
from flowexec.models.node import NodeCategory, NodeDefinition
from flowexec.models.workflow import WorkflowNode

logger = structlog.get_logger()

# Validated node data
DataT = TypeVar("DataT")


def pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, so camelCase and snake_case both work."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


class BaseNode(ABC, Generic[DataT]):
    """Abstract base class for node executors.

    All nodes must implement:
    - get_definition(): Returns node metadata, including handled node types
    - execute(): Produces the node output from validated data

    Example implementation:
        class TransformNode(BaseNode[TransformInput]):
            def get_definition(self) -> NodeDefinition:
                return NodeDefinition(
                    name="transform",
                    display_name="Transform",
                    category=NodeCategory.ACTION,
                    node_types=("transform",),
                    ...
                )

            async def execute(
                self,
                data: TransformInput,
                context: ExecutionContext,
            ) -> Any:
                return evaluate_expression(data.expression, context)
    """

    @abstractmethod
    def get_definition(self) -> NodeDefinition:
        """Get the node definition with metadata.

        Returns:
            NodeDefinition with name, category and handled node types
        """
        pass

    @abstractmethod
    async def execute(self, data: DataT, context: ExecutionContext) -> Any:
        """Execute the node's operation.

        Args:
            data: Validated node data
            context: Execution context of the current run

        Returns:
            Node output (any JSON-serializable value)

        Raises:
            ExecutionError: If execution fails
        """
        pass

    def validate_data(self, data: dict[str, Any]) -> DataT:
        """Validate and transform raw node data.

        Override this method to implement custom validation.

        Raises:
            NodeValidationError: If validation fails
        """
        return data  # type: ignore

    async def run(self, node: WorkflowNode, context: ExecutionContext) -> Any:
        """Validate the node's data and execute it.

        Errors from the taxonomy pass through unchanged; anything else is
        wrapped in a NodeExecutionError.

        Args:
            node: Workflow node to execute
            context: Execution context

        Returns:
            Node output
        """
        definition = self.get_definition()

        logger.debug(
            "node_execution_starting",
            node_id=node.id,
            node_type=node.type,
            execution_id=context.execution_id,
        )

        try:
            data = self.validate_data(node.data)
            output = await self.execute(data, context)
        except ExecutionError:
            raise
        except Exception as e:
            logger.exception(
                "node_execution_failed",
                node_id=node.id,
                node_name=definition.name,
                execution_id=context.execution_id,
            )
            raise NodeExecutionError(
                message=str(e),
                node_name=definition.name,
                error_code="EXECUTION_ERROR",
            ) from e

        logger.debug(
            "node_execution_completed",
            node_id=node.id,
            node_type=node.type,
            execution_id=context.execution_id,
        )
        return output

    @property
    def name(self) -> str:
        """Get node name."""
        return self.get_definition().name

    @property
    def category(self) -> NodeCategory:
        """Get node category."""
        return self.get_definition().category
