from neurosearch.pool.population import Population

__all__ = ['Population']
