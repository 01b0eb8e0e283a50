"""
Vue i18n 提取 - 使用示例

演示如何使用 process_source、VueI18nProcessor 与自定义配置
"""

import sys
from pathlib import Path

# 添加 src 到路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from vue_i18n_tools.api import process_source
from vue_i18n_tools.core import VueI18nProcessor
from vue_i18n_tools.sfc import parse_component
from vue_i18n_tools.utils.config import ExtractorConfig

COMPONENT = """<template>
  <div title="用户中心">
    <h1>欢迎回来</h1>
    <p>你好，{{ user.name }}！</p>
  </div>
</template>

<script setup lang="ts">
import { ref } from 'vue'

const count = ref(0)
const tip = '共' + count.value + '条消息'
</script>
"""


def example_process_source():
    """示例：一次调用完成解析、改写与序列化"""
    print("=== process_source 示例 ===\n")

    new_text, result = process_source(COMPONENT, "UserCenter.vue")
    print(new_text)

    print("提取结果:")
    for key, text in result.entries.items():
        print(f"  {key} → {text}")
    print(f"\n应用改动: {result.applied}")
    print(f"补充引入: {result.import_added}")


def example_normalize():
    """示例：先统一插值写法，再提取"""
    print("\n\n=== 插值预处理示例 ===\n")

    config = ExtractorConfig(normalize_interpolation=True, translate_fn="t")
    tree = parse_component(COMPONENT, "UserCenter.vue")
    result = VueI18nProcessor(tree, config).process()

    print(tree.to_source())
    print(f"预处理节点: {result.normalized}")
    print(f"key 列表: {list(result.entries)}")


if __name__ == '__main__':
    print("Vue i18n 提取 - 演示\n")
    print("=" * 60)

    example_process_source()
    example_normalize()
