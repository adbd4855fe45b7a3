"""
StockFlow 中间件
"""
