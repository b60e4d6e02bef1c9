"""Comparison of a local index against what a remote peer already holds."""

from typing import List

from blockdex.models import DirIndex, FileTransfer, TreeDiff

from .lookup import HashLookup


class TreeDiffer:
    """Works out which parts of a local tree a remote peer must receive.

    The walk is top-down and stops as soon as a hash is known remotely: a
    shared subtree is reported once and not descended, a shared file is
    reported without looking at its blocks. Every other file is split into
    blocks the remote can reuse and blocks it must be sent.
    """

    def __init__(self, remote: HashLookup) -> None:
        self.remote = remote

    def diff(self, local_root: DirIndex) -> TreeDiff:
        """Compare a finalized local tree against the remote lookup.

        Args:
            local_root: Finalized root of the local index.

        Returns:
            TreeDiff with shared paths and per-file transfers, in
            serialization order.
        """
        result = TreeDiff()
        if self.remote.has_dir(local_root.get_hash()):
            result.root_shared = True
            return result

        stack: List[DirIndex] = [local_root]
        while stack:
            current = stack.pop()
            subdirs = []
            for child in current.children():
                path = child.rel_path()
                if isinstance(child, DirIndex):
                    if self.remote.has_dir(child.get_hash()):
                        result.shared_dirs.append(path)
                    else:
                        subdirs.append(child)
                elif self.remote.has_file(child.get_hash()):
                    result.shared_files.append(path)
                else:
                    result.transfers.append(self._split_blocks(path, child))
            stack.extend(reversed(subdirs))

        return result

    def _split_blocks(self, path, file_index) -> FileTransfer:
        transfer = FileTransfer(path=path, file=file_index)
        for block in file_index.blocks:
            if self.remote.has_block(block.strong):
                transfer.reusable_blocks.append(block)
            else:
                transfer.missing_blocks.append(block)
        return transfer
