"""Asynchronous safe-spot search and teleport for voxel worlds."""
