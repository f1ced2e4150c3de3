"""
StackEvo - genetic search over programs for a tiny stack machine.
"""
