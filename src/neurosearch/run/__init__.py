from neurosearch.run.config import Config

__all__ = ['Config']
