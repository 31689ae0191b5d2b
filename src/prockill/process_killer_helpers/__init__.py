"""Building blocks for :mod:`prockill.process_killer`."""
