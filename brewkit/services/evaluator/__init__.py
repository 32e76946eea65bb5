"""配方求值模块

- steps.py: 依赖 / 拉取 / 版本 / 构建 / 安装 / 校验 6 个步骤
- evaluator.py: 协调器，严格顺序执行，任一步失败立即中止
"""

from brewkit.services.evaluator.evaluator import Evaluator
from brewkit.services.evaluator.steps import EvaluationSteps

__all__ = ["Evaluator", "EvaluationSteps"]
