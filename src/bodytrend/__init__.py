"""bodytrend: daily weigh-ins, EWMA weight trend and energy balance."""

__version__ = "0.1.0"
