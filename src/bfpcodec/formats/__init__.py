"""格式模块"""
