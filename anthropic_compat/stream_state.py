"""
Per-exchange state for the streaming translator.

A ``TranslationState`` is created when a streaming exchange begins, owned by
that exchange alone, and dropped when it ends.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class ToolCallAccumulator:
    """Tracks one upstream tool call across its argument fragments"""
    block_index: int
    id: str
    name: str
    arguments: str = ""


@dataclass
class TranslationState:
    message_start_sent: bool = False
    next_block_index: int = 0
    block_open: bool = False
    open_block_type: Optional[str] = None
    # upstream tool-call index -> accumulator
    tool_calls: Dict[int, ToolCallAccumulator] = field(default_factory=dict)
    input_tokens: int = 0
    output_tokens: int = 0
    finished: bool = False

    @property
    def open_block_index(self) -> Optional[int]:
        # Blocks are allocated in order and only the newest can be open
        return self.next_block_index - 1 if self.block_open else None

    def open_block(self, block_type: str) -> int:
        """Allocate the next content-block index and mark it open"""
        if self.block_open:
            raise RuntimeError("a content block is already open")
        index = self.next_block_index
        self.next_block_index += 1
        self.block_open = True
        self.open_block_type = block_type
        return index

    def close_block(self) -> int:
        """Mark the open block closed and return its index"""
        index = self.open_block_index
        if index is None:
            raise RuntimeError("no content block is open")
        self.block_open = False
        self.open_block_type = None
        return index
