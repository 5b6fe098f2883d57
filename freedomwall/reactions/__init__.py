"""Toggle engine for likes, comment reactions and poll votes."""
