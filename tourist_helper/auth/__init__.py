"""Account signup, login and bearer-token authorization"""
