"""tripvoice：语音/文本驱动的旅行规划与记账后端"""

__version__ = "0.3.0"
