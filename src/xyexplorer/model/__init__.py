"""
The MODEL layer contains pure data structures and simulation logic.
It has NO knowledge of the GUI (Qt) or of how the lattice is drawn.
It deals with the engine contract, sweep scheduling, statistics and I/O.
"""
