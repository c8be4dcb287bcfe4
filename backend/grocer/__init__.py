"""YourGrocer - online grocery ordering marketplace backend"""
