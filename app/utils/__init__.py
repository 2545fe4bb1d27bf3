# Utils package - Shared utilities
from .geometry import flip_y, round_up, group_consecutive_numbers

__all__ = ['flip_y', 'round_up', 'group_consecutive_numbers']
