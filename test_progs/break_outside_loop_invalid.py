def main():
    if True:
        break
