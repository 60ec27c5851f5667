"""PerkHub: a perks/benefits directory API and its client-side directory view."""

__version__ = "0.1.0"
