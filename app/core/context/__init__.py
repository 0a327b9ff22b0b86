from .assembler import AssembledContext, ContextAssembler, context_assembler

__all__ = ["AssembledContext", "ContextAssembler", "context_assembler"]
