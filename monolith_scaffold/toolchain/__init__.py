"""External tool wrappers (git, npm, npx) used by the scaffolding pipeline."""

from monolith_scaffold.toolchain.git import GitError, GitRepository
from monolith_scaffold.toolchain.node import NodeToolchain, ToolchainError

__all__ = [
    "GitError",
    "GitRepository",
    "NodeToolchain",
    "ToolchainError",
]
