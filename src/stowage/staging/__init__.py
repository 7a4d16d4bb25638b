from stowage.staging.buffer import BufferStats, StagingBuffer

__all__ = ["BufferStats", "StagingBuffer"]
