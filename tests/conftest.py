"""
Pytest 配置文件

为所有测试配置共享的 fixtures 和设置
"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture(scope="session")
def project_root_path():
    """返回项目根目录路径"""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def tools_path(project_root_path):
    """返回 tools 目录路径"""
    return project_root_path / "tools"


@pytest.fixture(scope="session")
def src_path(project_root_path):
    """返回 src 目录路径"""
    return project_root_path / "src"


@pytest.fixture
def sample_component() -> str:
    """示例组件：模板文本、属性、脚本字面量、拼接、样式、注释"""
    return """<template>
  <div class="page" title="页面标题">
    <!-- 这里是注释 -->
    <h1>欢迎使用</h1>
    <p>Hello</p>
    <input :placeholder="'请输入'" />
  </div>
</template>

<script setup lang="ts">
import { ref } from 'vue'

const name = ref('')
const label = '保存'
const again = "保存"
const greeting = '你好' + name.value + '！'
</script>

<style scoped>
.page::after { content: '样式'; }
</style>
"""
