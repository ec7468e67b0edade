"""Ambler: patrol routes and motion for NPCs on a 2D tile grid."""
