"""
Text replacement applied to archived blocks.
"""

import re

from ..models import Block, TextReplacementSettings


class TextReplacementService:
    """
    Applies the configured regex substitution to a block and its children.
    """

    def __init__(self, settings: TextReplacementSettings):
        self.settings = settings
        self.pattern = re.compile(settings.regex) if settings.apply_replacement else None

    def replace_text(self, block: Block) -> Block:
        if self.pattern is None:
            return block
        for node in block.walk():
            if node.text is not None:
                node.text = self.pattern.sub(self.settings.replacement, node.text)
        return block
