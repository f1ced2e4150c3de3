"""
Fitness evaluation of stack programs against a reference function.
"""

from typing import Callable, Optional, Sequence

from ..entities import EvaluationResult
from .lang import Prog, Stack
from .targets import TARGETS


class FitnessEvaluator:
    """Scores programs by running them over a grid of input pairs"""

    def __init__(self, target: Callable[[int, int], int],
                 inputs: Optional[Sequence[int]] = None,
                 step_limit: int = 100,
                 length_weight: float = 0.01,
                 length_scale: int = 100):
        """Initialize evaluator for the given reference function"""
        if not 0.0 <= length_weight <= 1.0:
            raise ValueError(f"length_weight must be within [0, 1], got {length_weight}")
        if length_scale <= 0:
            raise ValueError(f"length_scale must be positive, got {length_scale}")
        self.target = target
        self.inputs = list(inputs) if inputs is not None else list(range(10))
        self.step_limit = step_limit
        self.length_weight = length_weight
        self.length_scale = length_scale

    def __call__(self, gene) -> float:
        return self.evaluate_program(gene.progs).fitness

    def evaluate_program(self, program: Sequence[Prog]) -> EvaluationResult:
        """Run the program once per input pair and return the complete result"""
        total = 0
        correct = 0
        for a in self.inputs:
            for b in self.inputs:
                # Fresh stack with the inputs pushed in order
                stack = Stack()
                stack.push(a)
                stack.push(b)
                stack.queue_program(program)
                stack.run_until(self.step_limit)
                if stack.pop() == self.target(a, b):
                    correct += 1
                total += 1

        accuracy = correct / total if total else 0.0
        fitness = ((1.0 - self.length_weight) * accuracy
                   + self.length_weight * self._shortness(len(program)))
        return EvaluationResult(
            correct=correct,
            total=total,
            length=len(program),
            fitness=fitness
        )

    def _shortness(self, length: int) -> float:
        """Bonus for short programs, clamped so long programs never go negative"""
        return min(1.0, max(0.0, 1.0 - length / self.length_scale))


def create_evaluator(target_name: str = "add", input_range: int = 10,
                     **kwargs) -> FitnessEvaluator:
    """
    Create a FitnessEvaluator for one of the named reference functions.

    Args:
        target_name: One of the names in stackevo.vm.targets.TARGETS
        input_range: Inputs a and b each range over 0 .. input_range - 1
        **kwargs: Additional arguments for the evaluator

    Returns:
        Configured FitnessEvaluator
    """
    if target_name not in TARGETS:
        raise ValueError(f"Unknown target: {target_name}. Available: {list(TARGETS.keys())}")
    if input_range < 1:
        raise ValueError(f"input_range must be at least 1, got {input_range}")

    return FitnessEvaluator(TARGETS[target_name], inputs=range(input_range), **kwargs)
