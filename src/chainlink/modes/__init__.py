"""
Game modes.

Modes are small controllers that define the "rules around the puzzle":
- scoring formulas and bonuses
- time limits, lives and difficulty ramps
- terminal conditions and the final result record

Modes should not render anything, validate words, or talk to storage directly.
"""
