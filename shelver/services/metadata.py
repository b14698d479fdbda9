"""
Metadata annotation for archived tasks.
"""

from ..models import Block, MetadataSettings, Rule
from .placeholders import PlaceholderResolver


class MetadataService:
    """
    Appends the configured metadata template to the first line of a task.
    """

    def __init__(self, placeholder_resolver: PlaceholderResolver, settings: MetadataSettings):
        self.placeholder_resolver = placeholder_resolver
        self.settings = settings

    def append_metadata(self, block: Block, rule: Rule, file=None) -> Block:
        """
        Annotate a task before it is archived.

        Args:
            block: The task to annotate
            rule: The rule routing the task; its date format wins over the global one
            file: The document the task came from

        Returns:
            The same block, annotated when metadata is enabled
        """
        if not self.settings.add_metadata or block.text is None:
            return block

        date_format = rule.date_format or self.settings.date_format
        metadata = self.placeholder_resolver.resolve(self.settings.metadata, date_format, file)
        first_line, separator, rest = block.text.partition("\n")
        block.text = f"{first_line} {metadata}{separator}{rest}"
        return block
