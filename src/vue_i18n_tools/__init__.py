"""
Vue i18n 提取工具集

把 Vue 单文件组件和脚本中的中文文本替换为 $t(...) 调用：
- 模板文本、属性值、字符串字面量、模板字符串与 + 拼接
- 收集 key -> 原文 映射
- 自动补充 useI18n 引入
"""

__version__ = "0.1.0"
__all__ = ["api", "cli", "core", "sfc", "tree", "utils"]
