"""
The MODEL layer contains pure data structures and layout logic.
It has NO knowledge of the GUI (Qt).
It deals with the partition tree, its colors and its geometry.
"""
