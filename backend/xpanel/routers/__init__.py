"""
xpanel 路由模块包 (xpanel Router Module Package)

- settings.py: 面板设置的查询、批量更新与重置

所有路由在 main.create_app() 中注册，并挂载在设置中的 webBasePath 之下。
"""
