"""
Accounts app: users, companies and per-company roles.

This app provides:
- User: email-login user model
- Company: a tenant of the accounting system
- UserCompanyRole: the role a user holds on a company
- Session resolution, the authorization gate and company commands
- The server-rendered login, admin and staff pages
"""
